# storage/schema.py
TABLE = "transfer_events"

# column names follow the existing table written by the ingester
COLUMNS = (
    "id",
    "from",
    "to",
    "value",
    "tokenAddress",
    "blockNumber",
    "timestamp",
    "transactionHash",
)

SELECT_TRANSFER_COLUMNS = """
    id, "from", "to", value, "tokenAddress", "blockNumber", timestamp, "transactionHash"
"""

CREATE_TABLE_TRANSFER_EVENTS_SQLITE = """
CREATE TABLE IF NOT EXISTS transfer_events (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    "from"            TEXT,
    "to"              TEXT,
    value             TEXT,
    "tokenAddress"    TEXT,
    "blockNumber"     INTEGER,
    timestamp         TEXT
);
"""

CREATE_TABLE_TRANSFER_EVENTS_PG = """
CREATE TABLE IF NOT EXISTS transfer_events (
    id                SERIAL PRIMARY KEY,
    "from"            VARCHAR(255),
    "to"              VARCHAR(255),
    value             VARCHAR(255),
    "tokenAddress"    VARCHAR(255),
    "blockNumber"     INTEGER,
    timestamp         TIMESTAMP WITH TIME ZONE
);
"""

# lookups the read paths depend on
CREATE_INDEXES = (
    'CREATE INDEX IF NOT EXISTS transfer_events_block_number ON transfer_events ("blockNumber")',
    'CREATE INDEX IF NOT EXISTS transfer_events_token_address ON transfer_events ("tokenAddress")',
    "CREATE INDEX IF NOT EXISTS transfer_events_timestamp ON transfer_events (timestamp)",
)

INSERT_TRANSFER = """
INSERT INTO transfer_events
    ("from", "to", value, "tokenAddress", "blockNumber", timestamp, "transactionHash")
VALUES
    (:from_addr, :to_addr, :value, :token, :block_number, :ts, :tx_hash)
"""
