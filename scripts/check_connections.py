#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify MongoDB and the code judge endpoint are reachable.
Usage: python scripts/check_connections.py
"""
from placement_prep.core.config import get_settings
from placement_prep.db.mongodb import test_mongo_connection
from placement_prep.services.llm_client import LLMCodeJudge


def main():
    settings = get_settings()
    print("=" * 50)
    print("PLACEMENT PREP PORTAL - CONNECTION CHECK")
    print("=" * 50)

    # Check MongoDB
    print("\n[1] Checking MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    MongoDB: CONNECTED")
    else:
        print("    MongoDB: FAILED")

    # Check the judge (only if API key is set)
    print("\n[2] Checking code judge...")
    if settings.llm_api_key:
        print(f"    Base URL: {settings.llm_base_url}")
        print(f"    Model: {settings.llm_model} (timeout {settings.llm_timeout_seconds}s)")
        if LLMCodeJudge().test_connection():
            print("    Judge: CONNECTED")
        else:
            print("    Judge: FAILED (submissions will fall back to partial credit)")
    else:
        print("    Judge: API key not configured (submissions will fall back to partial credit)")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
