"""
Development Tokens: one signed JWT per role
=============================================================================
In production the session provider issues tokens. Locally there is no
provider, so this script signs one token per role with the configured
JWT secret. Paste a token into Swagger UI's "Authorize" dialog to see the
API from that role's point of view.

Run: python -m scripts.issue_dev_tokens
=============================================================================
"""

import os
import sys
from datetime import timedelta

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from madrassa.auth.jwt import create_access_token
from madrassa.auth.resources import Role


# A working day, so a token survives a local debugging session.
TOKEN_LIFETIME = timedelta(hours=8)

DEV_USERS = {
    Role.ADMIN: "admin",
    Role.SECRETARIAT: "secretariaat",
    Role.TEACHER: "docent",
    Role.GUARDIAN: "ouder",
    Role.STUDENT: "leerling",
}


def main():
    print("Development tokens")
    print("=" * 50)
    for role, username in DEV_USERS.items():
        token = create_access_token(
            {"sub": username, "role": role.value},
            expires_delta=TOKEN_LIFETIME,
        )
        print(f"\n{role.value} ({username}):")
        print(f"  {token}")


if __name__ == "__main__":
    main()
