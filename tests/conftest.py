"""Test-wide environment: in-memory database, no registrar credentials."""

import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["APP_ENV"] = "test"
os.environ["SW_RESELLER_ID"] = ""
os.environ["SW_API_KEY"] = ""
