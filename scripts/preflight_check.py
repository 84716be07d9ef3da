#!/usr/bin/env python3
import sys
import os

print("Running preflight import check...")
try:
    # Dummy env so settings load without a .env file
    os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
    os.environ.setdefault("WEBHOOK_URL", "http://localhost:9/webhook")

    import granacred.main
    print("Import granacred.main: OK")

    import granacred.gateway.client
    print("Import granacred.gateway.client: OK")

    from granacred.core.identifier import validate
    assert validate("529.982.247-25"), "reference CPF must validate"
    print("CPF checksum self-test: OK")

    print("Preflight check passed.")
    sys.exit(0)
except Exception as e:
    print(f"Preflight check FAILED: {e}")
    import traceback
    traceback.print_exc()
    sys.exit(1)
