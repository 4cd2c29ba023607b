# atelier_ledger/constants.py
DATA_DIR = "data"
DB_FILE_NAME = "ledger.db"

# Environment overrides
ENV_DB_PATH = "ATELIER_LEDGER_DB"
ENV_LOG_LEVEL = "ATELIER_LEDGER_LOG_LEVEL"

SCHEMA_VERSION = "3"

TABLE_SCHEMA_VERSION = "schema_version"
TABLE_SALES = "sales"

# Quotes
DEFAULT_QUOTE_VALIDITY_DAYS = 7
DEFAULT_STORE_NAME = "Minha Loja de Personalizados"
DEFAULT_STORE_CONTACT = "WhatsApp: (99) 99999-9999"
