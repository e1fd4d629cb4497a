"""Plain data types shared across Vigil: snowflake IDs, account snapshots,
verification enums and records, and the platform actions protocol."""
