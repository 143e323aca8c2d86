# app/core/ids.py
import itertools
import secrets

# Shared by every caller in the process; never reset.
_counter = itertools.count(1)


def new_id() -> str:
    """
    Generate a short opaque identifier, e.g. "1a3f9c2e7" or "2f1b0c9d4".

    Uniqueness scope: one process lifetime. The hex counter prefix is
    strictly increasing and the random suffix has a fixed width, so two
    ids from the same process can never be equal. Ids from different
    processes may collide; nothing relies on that.
    """
    return f"{next(_counter):x}{secrets.token_hex(4)}"


def new_access_key() -> str:
    """
    Access key handed to the buyer: "KEY-" + 16 uppercase hex characters.
    """
    return f"KEY-{secrets.token_hex(8).upper()}"
