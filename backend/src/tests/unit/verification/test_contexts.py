"""Unit tests for the validation context matrix."""

from navgate.verification.contexts import build_nav_validation_contexts, normalize_tier_levels


class TestNormalizeTierLevels:
    def test_always_includes_zero(self) -> None:
        assert normalize_tier_levels([]) == [0]
        assert normalize_tier_levels([3]) == [0, 3]

    def test_invalid_levels_ignored(self) -> None:
        assert normalize_tier_levels([2, "1", -1, "gold", None, 2]) == [0, 1, 2]


class TestBuildContexts:
    def test_matrix_size(self) -> None:
        contexts = build_nav_validation_contexts([1], [frozenset(), frozenset({"notes:sharing"})])
        # 2 roles x 2 tenant shapes x 2 tiers x 2 sets, plus one guest per set
        assert len(contexts) == 2 * 2 * 2 * 2 + 2

    def test_names_are_descriptive(self) -> None:
        contexts = build_nav_validation_contexts([0], [frozenset(), frozenset({"admin", "notes:sharing"})])
        names = [c.name for c in contexts]
        assert names[0] == "admin-single-tenant-tier0-entitlements-none"
        assert "user-multi-tenant-tier0-entitlements-admin|notessharing" in names
        assert names[-1] == "guest-tier0-entitlements-admin|notessharing"

    def test_context_shapes(self) -> None:
        contexts = {c.name: c.context for c in build_nav_validation_contexts([2], [frozenset({"x"})])}
        multi = contexts["user-multi-tenant-tier2-entitlements-x"]
        assert multi.role == "user"
        assert multi.has_multiple_tenants
        assert multi.tenant_id is not None
        assert multi.tier_level == 2

        guest = contexts["guest-tier0-entitlements-x"]
        assert guest.is_guest
        assert guest.tenant_id is None
        assert guest.entitlements == frozenset({"x"})

    def test_duplicate_sets_collapsed(self) -> None:
        contexts = build_nav_validation_contexts([0], [["a", "b"], ["b", "a"]])
        assert len(contexts) == 2 * 2 + 1
