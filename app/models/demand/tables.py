"""Local cache tables."""

DEMAND_RECORD_DDL = """
CREATE TABLE IF NOT EXISTS demand_record (
    id VARCHAR NOT NULL,
    date VARCHAR NOT NULL,
    client VARCHAR NOT NULL,
    city VARCHAR NOT NULL,
    area VARCHAR NOT NULL,
    demand_score BIGINT NOT NULL,
    timestamp VARCHAR NOT NULL,
    PRIMARY KEY (id, date)
)
"""

DEMAND_RECORD_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_demand_date ON demand_record(date)",
    "CREATE INDEX IF NOT EXISTS idx_demand_client ON demand_record(client)",
    "CREATE INDEX IF NOT EXISTS idx_demand_city ON demand_record(city)",
    "CREATE INDEX IF NOT EXISTS idx_demand_area ON demand_record(area)",
]

SYNC_META_DDL = """
CREATE TABLE IF NOT EXISTS sync_meta (
    id VARCHAR PRIMARY KEY,
    synced_at VARCHAR
)
"""

DEMAND_RECORD_COLUMNS = ["id", "date", "client", "city", "area", "demand_score", "timestamp"]
