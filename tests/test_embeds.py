import datetime

import discord

from vigil.datatypes.account_datatypes import SuspicionVerdict
from vigil.datatypes.verification_datatypes import UNLIMITED, AuditEventType, QuotaStatus
from vigil.ui.verification_embed import (
    build_audit_embed,
    build_auto_ban_embed,
    build_verification_embed,
    format_remaining,
)


def fields_of(embed):
    return {field.name: field.value for field in embed.fields}


def test_format_remaining():
    assert format_remaining(QuotaStatus(True, 3, 100.0), 5) == "3/5"
    assert format_remaining(QuotaStatus(True, UNLIMITED, 0), 5) == "∞"


def test_suspicious_verification_embed_lists_reasons(make_account):
    target = make_account(
        user_id=500,
        username="John123",
        created_at=datetime.datetime(2024, 5, 29, tzinfo=datetime.timezone.utc),
        avatar_url="https://cdn.example/500.png",
    )
    verdict = SuspicionVerdict(("account younger than 7 days", "generic username pattern"))

    embed = build_verification_embed(target, verdict, QuotaStatus(True, 4, 100.0), 5)

    assert embed.color == discord.Color.red()
    assert embed.description == "⚠️ Suspicious account detected"
    fields = fields_of(embed)
    assert fields["Member"] == "John123 (500)"
    assert fields["Account created"] == f"<t:{int(target.created_at.timestamp())}:R>"
    assert fields["Verifications left"] == "4/5"
    assert fields["Reasons"] == "account younger than 7 days\ngeneric username pattern"
    assert embed.thumbnail.url == "https://cdn.example/500.png"


def test_clean_verification_embed_is_green(make_account):
    embed = build_verification_embed(make_account(), SuspicionVerdict(), QuotaStatus(True, 0, 100.0), 5)

    assert embed.color == discord.Color.green()
    assert embed.description == "✅ Account verified"
    assert "Reasons" not in fields_of(embed)


def test_audit_embed_descriptions(make_account):
    target = make_account(username="newcomer")
    actor = make_account(user_id=2, username="mod")

    assert build_audit_embed(AuditEventType.VERIFY, target, actor).description == "newcomer was verified by mod"
    assert build_audit_embed(AuditEventType.SUSPECT, target, actor).description == "newcomer was flagged as suspicious"

    ban = build_audit_embed(AuditEventType.BAN, target, actor, ("no custom avatar",))
    assert ban.description == "newcomer was banned by mod"
    assert fields_of(ban)["Reasons"] == "no custom avatar"
    assert fields_of(ban)["Moderator"] == "mod"


def test_auto_ban_embed(make_account):
    bot = make_account(user_id=3000, username="FreeNitroGenerator", discriminator="1234", is_bot=True)

    embed = build_auto_ban_embed(bot, 10.0, "Malicious bot")

    assert embed.title == "⚠️ Malicious bot banned"
    assert "FreeNitroGenerator#1234" in embed.description
    assert "10 seconds" in embed.description
    assert fields_of(embed) == {"ID": "3000", "Reason": "Malicious bot"}
