"""Services binding Vigil's moderation logic to Discord guilds."""
