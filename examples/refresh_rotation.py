"""
Refresh Rotation Example

Refresh tokens are single-use: each refresh replaces the slot, so a
replayed token fails. Five concurrent refreshes with the same pair
serialise on the identity and exactly one wins.

Run: uv run python examples/refresh_rotation.py
"""

from combinators import batch, lift as L
from kungfu import Ok, Error

from examples._infra import banner, run
from storefront import StorefrontConfig, build_services


async def main() -> None:
    banner("Refresh Rotation")

    auth = build_services(StorefrontConfig(_env_file=None)).auth

    match await auth.create_guest():
        case Ok(grant):
            pass
        case Error(e):
            print(f"Error: {e.message}")
            return

    # 1. Rotate
    print("1. Rotate:")
    match await auth.refresh(grant.access_token, grant.refresh_token):
        case Ok(rotated):
            print(f"   New refresh token: {rotated.refresh_token[:12]}...")
        case Error(e):
            print(f"   Error: {e.message}")
            return

    # 2. Replay the old token
    print("\n2. Replay old token:")
    match await auth.refresh(grant.access_token, grant.refresh_token):
        case Ok(_):
            print("   Accepted (unexpected)")
        case Error(e):
            print(f"   Rejected: {e.message}")

    # 3. Concurrent (5 refreshes via combinators.batch)
    print("\n3. Concurrent (5 refreshes):")
    outcomes: list[str] = []

    async def attempt(_: int) -> None:
        match await auth.refresh(rotated.access_token, rotated.refresh_token):
            case Ok(_):
                outcomes.append("ok")
            case Error(e):
                outcomes.append(e.message)

    await batch(
        range(5),
        handler=lambda i: L.catching_async(lambda: attempt(i), on_error=str),
        concurrency=5,
    )
    print(f"   Succeeded: {outcomes.count('ok')} (only 1!)")
    print(f"   Rejected:  {len(outcomes) - outcomes.count('ok')}")


if __name__ == "__main__":
    run(main)
