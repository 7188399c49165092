from yoyo import step

__depends__ = set()

steps = [
    step(
        """
        -- One row per storage key; every value is a JSON document
        CREATE TABLE kv_store (
            key TEXT PRIMARY KEY,
            value JSONB NOT NULL,
            updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
        );
        """,
        """
        DROP TABLE IF EXISTS kv_store CASCADE;
        """
    )
]
