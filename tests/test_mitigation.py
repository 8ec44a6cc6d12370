# tests/test_mitigation.py
"""
Tests for the mitigator option record and dispatch.
"""

import pytest

from valija.errors import ConfigurationError, ValijaErrorCodes
from valija.mitigation import MitigateOptions, mitigate


def _fake_rewriter(source, options):
    # Stands in for the external rewriter: only handles `o.x++`.
    if options.rewrite_property_update_expr:
        return source.replace("o.x++", 'o[(1, "x")]++')
    return source


class TestMitigateOptions:

    def test_defaults_off(self):
        opts = MitigateOptions()
        assert opts.enabled() == ()
        assert not opts.any_enabled()

    def test_from_camel_case(self):
        opts = MitigateOptions.from_mapping({
            "rewritePropertyUpdateExpr": True,
            "rewritePropertyCompoundAssignmentExpr": False,
        })
        assert opts.rewrite_property_update_expr is True
        assert opts.rewrite_property_compound_assignment_expr is False
        assert opts.enabled() == ("rewrite_property_update_expr",)

    def test_from_snake_case(self):
        opts = MitigateOptions.from_mapping({"rewrite_property_compound_assignment_expr": True})
        assert opts.enabled() == ("rewrite_property_compound_assignment_expr",)

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError) as exc:
            MitigateOptions.from_mapping({"rewriteEverything": True})
        assert exc.value.code == ValijaErrorCodes.BAD_OPTION
        assert "rewriteEverything" in exc.value.message

    @pytest.mark.parametrize("value", ["false", 0, 1, None])
    def test_non_boolean_value(self, value):
        with pytest.raises(ConfigurationError) as exc:
            MitigateOptions.from_mapping({"rewritePropertyUpdateExpr": value})
        assert exc.value.code == ValijaErrorCodes.BAD_OPTION
        assert "must be a boolean" in exc.value.message


class TestMitigate:

    def test_passes_through_when_nothing_enabled(self):
        assert mitigate("o.x++;") == "o.x++;"
        assert mitigate("o.x++;", MitigateOptions(), _fake_rewriter) == "o.x++;"

    def test_missing_rewriter(self):
        opts = MitigateOptions(rewrite_property_update_expr=True)
        with pytest.raises(ConfigurationError) as exc:
            mitigate("o.x++;", opts)
        assert exc.value.code == ValijaErrorCodes.MISSING_REWRITER
        assert "rewrite_property_update_expr" in exc.value.message

    def test_rewriter_applied(self):
        opts = MitigateOptions(rewrite_property_update_expr=True)
        assert mitigate("o.x++;", opts, _fake_rewriter) == 'o[(1, "x")]++;'

    def test_rewriter_receives_options(self):
        seen = []
        opts = MitigateOptions(rewrite_property_compound_assignment_expr=True)
        mitigate("o.x += 1;", opts, lambda src, o: seen.append(o) or src)
        assert seen == [opts]
