# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication core.

This package provides:
- Signing key bootstrap (data/secret)
- The single registered credential (data/login.json)
- Runtime cookie config re-read per use (data/config.json)
- Password hashing/verification (argon2)
- Signed, time-limited session tokens (itsdangerous)
- The AuthToken cookie and the gate that ties it all together
"""
