"""Unit tests for navgate exception payloads."""

from navgate.core.exceptions import (
    CapabilityDeniedError,
    NamespaceConflictError,
    NavCollisionError,
    NavgateException,
    ReservedIdViolationError,
    UnknownCapabilityError,
)


class TestErrorCodes:
    def test_all_errors_share_base(self) -> None:
        """Every error carries a machine-readable code and a details dict."""
        errors = [
            CapabilityDeniedError("notes", "app:routes"),
            UnknownCapabilityError("app:teleport"),
            NamespaceConflictError("notes.", "notes", "notes_v2"),
            ReservedIdViolationError("intruder", ["core.anything"]),
            NavCollisionError({"billing.upgrade": ["item in main", "item in userMenu"]}),
        ]
        codes = [e.error_code for e in errors]
        assert codes == [
            "CAPABILITY_DENIED",
            "UNKNOWN_CAPABILITY",
            "NAMESPACE_CONFLICT",
            "RESERVED_ID_VIOLATION",
            "NAV_COLLISION",
        ]
        assert all(isinstance(e, NavgateException) for e in errors)
        assert all(isinstance(e.details, dict) for e in errors)

    def test_capability_denied_message(self) -> None:
        error = CapabilityDeniedError("notes", "app:routes")
        assert str(error) == 'Plugin "notes" does not have capability "app:routes"'


class TestNavCollisionError:
    def test_message_names_ids_and_triggers(self) -> None:
        """The message lists each id, where it was seen and what triggered it."""
        error = NavCollisionError(
            {"billing.upgrade": ["item in main/\"billing.main\"", "item in userMenu/\"core.account\""]},
            triggers={"billing.upgrade": [f"ctx-{i}" for i in range(7)]},
            remediation="Rename one of them.",
        )
        assert error.ids == ["billing.upgrade"]
        assert '"billing.upgrade" is duplicated' in error.message
        assert "ctx-0, ctx-1, ctx-2, ctx-3, ctx-4 (+2 more)" in error.message
        assert error.message.endswith("Rename one of them.")

    def test_reserved_id_violation_names_plugin_and_area(self) -> None:
        error = ReservedIdViolationError("intruder", ["core.anything"], area="main")
        assert "intruder" in error.message
        assert "core.anything" in error.message
        assert 'area "main"' in error.message
