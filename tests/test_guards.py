"""Guard sentence tests."""

import pytest

from pymdo import expand
from pymdo._errors import DesugarError, GuardNotSupportedInFlavorError

ONCE = "::core::iter::once"
FILTER = "{ ::core::option::Option::Some(()) } else { ::core::option::Option::None })"


class TestSequenceGuards:
    def test_guard_filters(self):
        assert expand("sequence", "let x <- 0..10; if x % 2 == 0; x") == (
            "(0..10).into_iter().flat_map(move |x| { "
            f"(if x % 2 == 0 {FILTER}.into_iter().flat_map(move |()| {{ {ONCE}(x) }}) }})"
        )

    def test_leading_guard(self):
        assert expand("sequence", "if ready; 1") == (
            f"(if ready {FILTER}.into_iter().flat_map(move |()| {{ {ONCE}(1) }})"
        )

    def test_guard_with_closure_argument(self):
        result = expand("sequence", "let v <- vs; if v.iter().any(|e| { *e > 0 }); v")
        assert "(if v.iter().any(|e| { *e > 0 }) {" in result

    def test_if_let_guard(self):
        result = expand("sequence", "let x <- xs; if let Some(_) = x; 1")
        assert "(if let Some(_) = x {" in result


class TestUnsupportedGuards:
    @pytest.mark.parametrize("flavor", ["optional", "fallible"])
    def test_guard_rejected(self, flavor):
        with pytest.raises(GuardNotSupportedInFlavorError):
            expand(flavor, "let x <- a; if x > 0; x")

    def test_error_is_desugar_error(self):
        with pytest.raises(DesugarError):
            expand("optional", "if x; 1")

    def test_error_has_span(self):
        source = "let x <- a;\nif x > 0; x"
        with pytest.raises(GuardNotSupportedInFlavorError) as exc_info:
            expand("optional", source)
        span = exc_info.value.span
        assert span.line == 2
        assert span.column == 1
        assert source[span.start:span.end] == "if x > 0"

    def test_flavor_raises_directly(self, optional_flavor):
        with pytest.raises(GuardNotSupportedInFlavorError):
            optional_flavor.write_guard(None, lambda: None, lambda: None)
