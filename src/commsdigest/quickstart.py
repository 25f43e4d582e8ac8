"""Quickstart: provision a user, connect a source, ask a first question."""

import asyncio
import time
from collections.abc import Callable

import httpx

from commsdigest.adapters.attrove import AttroveAdapter, AttroveAdminAdapter
from commsdigest.config.settings import AttroveSettings
from commsdigest.reporting import ReportEmitter

FIRST_QUESTION = "What are my most recent messages about?"

DEMO_ANSWER = """   Your recent messages focus on three main topics: (1) The Q1 planning
   process — Sarah shared updated OKRs and is awaiting your feedback.
   (2) The API migration — Mike flagged a blocking issue in #engineering
   that needs review by Friday. (3) Customer onboarding — the design team
   shared new mockups in Slack and Lisa requested your sign-off."""

NEXT_STEPS = """
==================
Quickstart complete!

Next steps:
- Explore the SDK: https://docs.attrove.com/sdks/typescript
- Try the MCP server: npx @attrove/mcp
- View the API reference: https://docs.attrove.com/api
"""


async def run_quickstart(
    settings: AttroveSettings,
    emitter: ReportEmitter,
    wait: Callable[[], None],
    email: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """Walk through provisioning, connecting and querying against the live API.

    Args:
        settings: Partner credentials and endpoints
        emitter: Output
        wait: Blocks until the user has connected an integration
        email: Address for the provisioned user (defaults to a unique test address)
        transport: HTTP transport override for both adapters
    """
    emitter.emit("\nAttrove Quickstart\n")
    emitter.emit("==================\n")

    email = email or f"quickstart-{int(time.time() * 1000)}@example.com"

    async with AttroveAdminAdapter.from_settings(settings, transport=transport) as admin:
        emitter.emit(f"1. Provisioning user: {email}")
        user = await admin.create_user(email)
        emitter.emit(f"   User created: {user.id}")
        emitter.emit(f"   API Key: {user.api_key[:15]}...")

        emitter.emit("\n2. Generating connect token...")
        token = await admin.create_connect_token(user.id)
        emitter.emit(f"   Token expires: {token.expires_at}")
        emitter.emit("\n   Connect URL (open in browser):")
        emitter.emit(f"   {admin.connect_url(token.token, user.id)}")

    emitter.emit("\n3. Open the URL above to connect Gmail, Slack, or another integration.")
    emitter.emit("   Once connected, press Enter to continue...\n")
    wait()

    emitter.emit("4. Querying user data...\n")
    attrove = AttroveAdapter(
        api_key=user.api_key,
        user_id=user.id,
        base_url=settings.base_url,
        transport=transport,
    )
    async with attrove:
        integrations = await attrove.list_integrations()
        if not integrations:
            emitter.emit("   No integrations connected yet.")
            emitter.emit("   Connect Gmail, Slack, or another service, then run quickstart again.")
            return

        emitter.emit(
            f"   Connected integrations: {', '.join(i.provider for i in integrations)}"
        )
        response = await attrove.query(FIRST_QUESTION)

    emitter.emit("\n   Answer:")
    emitter.emit(f"   {response.answer}")
    if response.used_message_ids:
        emitter.emit(f"\n   (Based on {len(response.used_message_ids)} messages)")

    emitter.emit(NEXT_STEPS)


async def run_demo(emitter: ReportEmitter, pace: float = 1.0) -> None:
    """Print realistic sample output without credentials.

    Args:
        emitter: Output
        pace: Multiplier for the simulated latency (0 disables it)
    """

    async def delay(ms: int) -> None:
        await asyncio.sleep(ms / 1000 * pace)

    emitter.emit("\nAttrove Quickstart\n")
    emitter.emit("==================\n")
    emitter.emit("[DEMO MODE]\n")

    emitter.emit("1. Provisioning user: demo@yourapp.com")
    await delay(300)
    emitter.emit("   User created: 2322ac54-9642-4a9e-a504-b0d227d17fa7")
    emitter.emit("   API Key: sk_live_demo_abc...")

    emitter.emit("\n2. Generating connect token...")
    await delay(200)
    emitter.emit("   Token expires: 2026-01-30T10:10:00.000Z")
    emitter.emit("\n   Connect URL (open in browser):")
    emitter.emit(
        "   https://connect.attrove.com/integrations/connect?token=pit_demo_token&user_id=2322ac54-..."
    )

    emitter.emit("\n3. [DEMO] Skipping OAuth — simulating connected integrations.\n")
    await delay(500)

    emitter.emit("4. Querying user data...\n")
    emitter.emit("   Connected integrations: gmail, slack")
    await delay(800)

    emitter.emit("\n   Answer:")
    emitter.emit(DEMO_ANSWER)
    emitter.emit("\n   (Based on 23 messages)")

    emitter.emit(NEXT_STEPS)
    emitter.emit("To run with real data, add your credentials to .env.\n")
