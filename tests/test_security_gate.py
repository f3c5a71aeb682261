import pytest

from concierge_ai.agents.security_gate import DEFAULT_SENSITIVE_RESOURCES, SecurityGate


gate = SecurityGate()

SENSITIVE_QUERIES = [
    "SELECT * FROM Bookings WHERE GuestId = '{actor}'",
    "select Email from users where Id = '{actor}'",
    "SELECT COUNT(*) FROM Payments p WHERE p.UserId = '{actor}'",
    "SELECT * FROM Messages WHERE SenderId = '{actor}' OR ReceiverId = '{actor}'",
    "SELECT * FROM Wishlists WHERE UserId = '{actor}'",
]

PUBLIC_QUERIES = [
    "SELECT Title, PricePerNight FROM Listings WHERE City = 'Cairo'",
    "SELECT AVG(Rating) FROM Reviews WHERE ListingId = 4",
    "SELECT 1",
]


@pytest.mark.parametrize("template", SENSITIVE_QUERIES)
@pytest.mark.parametrize("actor_id", [None, "", "   "])
def test_sensitive_query_without_actor_is_rejected(template, actor_id):
    decision = gate.validate(template.format(actor="U1"), actor_id)
    
    assert decision.allowed is False
    assert decision.reason


@pytest.mark.parametrize("template", SENSITIVE_QUERIES)
@pytest.mark.parametrize("actor_id", ["U1", "7f3c9a1e-0b5d-4c1a-9d2e-1234567890ab"])
def test_sensitive_query_containing_actor_id_is_allowed(template, actor_id):
    decision = gate.validate(template.format(actor=actor_id), actor_id)
    
    assert decision.allowed is True
    assert decision.reason is None


@pytest.mark.parametrize("query", PUBLIC_QUERIES)
@pytest.mark.parametrize("actor_id", [None, "", "U1"])
def test_public_query_is_always_allowed(query, actor_id):
    assert gate.validate(query, actor_id).allowed is True


def test_sensitive_query_scoped_to_someone_else_is_rejected_with_actionable_reason():
    decision = gate.validate("SELECT * FROM Bookings WHERE GuestId = 'U2'", "U1")
    
    assert decision.allowed is False
    assert "U1" in decision.reason
    assert "WHERE" in decision.reason


def test_matching_is_case_insensitive():
    decision = gate.validate("SELECT * FROM bOoKiNgS", None)
    assert decision.allowed is False


def test_custom_sensitive_resources():
    custom = SecurityGate(sensitive_resources=["Invoices"])
    
    assert custom.validate("SELECT * FROM invoices", None).allowed is False
    assert custom.validate("SELECT * FROM Bookings", None).allowed is True


def test_default_resources_cover_core_private_tables():
    for name in ("users", "bookings", "payments", "messages"):
        assert name in DEFAULT_SENSITIVE_RESOURCES
