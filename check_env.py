#!/usr/bin/env python3
"""Check the .env file and the settings the backend will start with."""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent
ENV_FILE = PROJECT_ROOT / ".env"
SECRET_KEYS = ("DD_SUPABASE_KEY",)

ENV_TEMPLATE = """# Supabase connection (required; the backend refuses to start without both)
# Dashboard -> Project -> Settings -> API
DD_SUPABASE_URL=https://your-project-id.supabase.co
DD_SUPABASE_KEY=your-anon-or-service-key

# API
DD_API_PREFIX=/api
DD_LOG_LEVEL=INFO
# DD_FRONTEND_ALLOWED_ORIGINS=http://localhost:5173,http://127.0.0.1:5173

# External lookups (defaults point at the public services)
# DD_POSTAL_CODE_BASE_URL=https://viacep.com.br/ws
# DD_GEOCODER_BASE_URL=https://nominatim.openstreetmap.org
# DD_GEOCODER_DELAY_SECONDS=1.0
# DD_OSRM_BASE_URL=https://router.project-osrm.org
"""


def _mask(line: str) -> str:
    name, _, value = line.partition("=")
    value = value.strip()
    if name.strip() in SECRET_KEYS and len(value) > 20:
        return f"{name}={value[:12]}...{value[-6:]}"
    return line


def main() -> int:
    print("=" * 60)
    print("Delivery Desk environment check")
    print("=" * 60)

    if not ENV_FILE.exists():
        ENV_FILE.write_text(ENV_TEMPLATE, encoding="utf-8")
        print(f"❌ No .env found, wrote a template to {ENV_FILE}")
        print("⚠️  Fill in DD_SUPABASE_URL and DD_SUPABASE_KEY, then run this again.")
        return 1

    print(f"✅ Found {ENV_FILE}")
    print("-" * 60)
    for line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        print(_mask(line))
    print("-" * 60)

    sys.path.insert(0, str(PROJECT_ROOT / "src"))
    try:
        from deliverydesk.config import Settings
    except ImportError as exc:
        print(f"❌ Could not import settings: {exc}")
        print("   Run from the project root after `pip install -e .`")
        return 1

    settings = Settings()
    missing = [
        name
        for name, value in (("DD_SUPABASE_URL", settings.supabase_url), ("DD_SUPABASE_KEY", settings.supabase_key))
        if not value
    ]
    print(f"Geocoder:    {settings.geocoder_base_url} (delay {settings.geocoder_delay_seconds}s)")
    print(f"OSRM:        {settings.osrm_base_url} ({settings.osrm_profile})")
    print(f"Postal code: {settings.postal_code_base_url}")
    print()
    if missing:
        print(f"❌ Missing required settings: {', '.join(missing)}")
        print("   Variables need the DD_ prefix and no spaces around '='.")
        return 1
    print("✅ Supabase is configured.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
