"""Global pytest configuration."""

import os

# Keep tests offline and on the in-memory store regardless of any local .env
os.environ["DATABASE_URL"] = ""
os.environ["GOOGLE_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
