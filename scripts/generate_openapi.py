"""Write the OpenAPI schema of the commission ledger API to stdout."""

import json

from commission_ledger.main import app

if __name__ == "__main__":
    print(json.dumps(app.openapi(), indent=2))
