"""Property-based tests using hypothesis."""

import re

from hypothesis import given, strategies as st

from pattern_emitter.emitter import PatternEmitter

PATTERNS = ["^a", "b$", ".*", "a.c", "^$"]
NAMES = st.text(alphabet="abc", max_size=4)

# (is_add, pattern index, listener index)
OPS = st.lists(
    st.tuples(st.booleans(), st.integers(0, len(PATTERNS) - 1), st.integers(0, 2)),
    max_size=40,
)


def _listeners():
    return [lambda *a: None, lambda *a: None, lambda *a: None]


class TestPropertyBased:
    """Property-based tests for registry invariants."""

    @given(OPS)
    def test_indices_stay_aligned(self, ops):
        """Property: pattern buckets and compiled patterns always share a key set."""
        # Arrange
        emitter = PatternEmitter(max_listeners=0)
        listeners = _listeners()
        registry = emitter._registry

        # Act & Assert
        for is_add, p, n in ops:
            if is_add:
                emitter.on_pattern(PATTERNS[p], listeners[n])
            else:
                emitter.remove_pattern_listener(PATTERNS[p], listeners[n])
            assert registry._patterns.keys() == registry._compiled.keys()
            assert all(registry._patterns.values())

    @given(OPS, NAMES)
    def test_emit_result_matches_matching_set(self, ops, name):
        """Property: emit is truthy exactly when the matching sequence is non-empty."""
        emitter = PatternEmitter(max_listeners=0)
        listeners = _listeners()
        for is_add, p, n in ops:
            if is_add:
                emitter.on_pattern(PATTERNS[p], listeners[n])
            else:
                emitter.remove_pattern_listener(PATTERNS[p], listeners[n])

        expected = bool(emitter.matching_listeners(name))

        assert emitter.emit(name) is expected

    @given(OPS, NAMES)
    def test_matching_set_is_literal_then_matching_patterns(self, ops, name):
        """Property: matching sequence equals literal bucket + buckets of matching patterns in order."""
        emitter = PatternEmitter(max_listeners=0)
        listeners = _listeners()
        literal = lambda *a: None  # noqa: E731
        emitter.on(name, literal)
        for is_add, p, n in ops:
            if is_add:
                emitter.on_pattern(PATTERNS[p], listeners[n])
            else:
                emitter.remove_pattern_listener(PATTERNS[p], listeners[n])

        expected = [literal]
        for regex in emitter.event_names()[1:]:
            if regex.search(name):
                expected.extend(emitter.pattern_listeners(regex))

        assert emitter.matching_listeners(name) == expected

    @given(st.lists(st.text(min_size=1), min_size=1, max_size=50))
    def test_dispatch_order(self, names):
        """Property: events are dispatched in emission order to a catch-all pattern."""
        emitter = PatternEmitter()
        received = []
        emitter.on(re.compile(".*", re.DOTALL), lambda *a: received.append(emitter.event))

        for name in names:
            emitter.emit(name)

        assert received == names

    @given(st.integers(min_value=1, max_value=5), NAMES)
    def test_once_fires_exactly_once(self, emits, name):
        """Property: a once listener on a matching pattern fires once however often the name is emitted."""
        emitter = PatternEmitter()
        counter = {"count": 0}
        emitter.once_on_pattern(".*", lambda: counter.__setitem__("count", counter["count"] + 1))

        for _ in range(emits):
            emitter.emit(name)

        assert counter["count"] == 1
        assert emitter.matching_listener_count(name) == 0
