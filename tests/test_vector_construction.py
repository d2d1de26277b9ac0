from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for vector construction tests")
class CombineTests(unittest.TestCase):
    def test_output_kind_is_highest_input_kind(self) -> None:
        from atomvec import ElementKind, combine

        cases = [
            ((True, False), ElementKind.LOGICAL, [True, False]),
            ((True, 2), ElementKind.INTEGER, [1, 2]),
            ((True, 2, 3.5), ElementKind.DOUBLE, [1.0, 2.0, 3.5]),
            ((1, "a"), ElementKind.CHARACTER, ["1", "a"]),
            ((True, 2.5, "z"), ElementKind.CHARACTER, ["TRUE", "2.5", "z"]),
        ]
        for values, kind, expected in cases:
            with self.subTest(values=values):
                out = combine(*values)
                self.assertIs(out.kind, kind)
                self.assertEqual(out.to_list(), expected)

    def test_nested_inputs_are_flattened_in_order(self) -> None:
        from atomvec import ElementKind, combine

        out = combine(combine(1, 2), [3, 4], 5)
        self.assertIs(out.kind, ElementKind.INTEGER)
        self.assertEqual(out.to_list(), [1, 2, 3, 4, 5])

    def test_empty_combine_is_untyped_empty(self) -> None:
        from atomvec import ElementKind, combine

        out = combine()
        self.assertEqual(len(out), 0)
        self.assertIs(out.kind, ElementKind.LOGICAL)
        self.assertIsNone(out.names)
        self.assertIs(combine(out, "a").kind, ElementKind.CHARACTER)

    def test_missing_values_take_the_output_kind(self) -> None:
        from atomvec import NA_CHARACTER, ElementKind, combine

        out = combine(1, None, 3)
        self.assertIs(out.kind, ElementKind.INTEGER)
        self.assertEqual(out.to_list(), [1, None, 3])

        text = combine(NA_CHARACTER, 1)
        self.assertIs(text.kind, ElementKind.CHARACTER)
        self.assertEqual(text.to_list(), [None, "1"])

    def test_names_survive_combination(self) -> None:
        from atomvec import combine

        out = combine({"a": 1, "b": 2}, 3)
        self.assertEqual(out.to_list(), [1, 2, 3])
        self.assertEqual(out.names, ("a", "b", ""))
        self.assertIsNone(combine(1, 2).names)

    def test_jax_arrays_are_accepted(self) -> None:
        import jax.numpy as jnp

        from atomvec import ElementKind, VectorTypeError, as_vector

        self.assertIs(as_vector(jnp.arange(3)).kind, ElementKind.INTEGER)
        self.assertIs(as_vector(jnp.asarray([0.5, 1.5])).kind, ElementKind.DOUBLE)
        self.assertIs(as_vector(jnp.asarray([True])).kind, ElementKind.LOGICAL)
        with self.assertRaises(VectorTypeError):
            as_vector(jnp.zeros((2, 2)))


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for vector construction tests")
class SequenceTests(unittest.TestCase):
    def test_default_step_follows_direction(self) -> None:
        from atomvec import ElementKind, sequence

        up = sequence(1, 5)
        self.assertIs(up.kind, ElementKind.INTEGER)
        self.assertEqual(up.to_list(), [1, 2, 3, 4, 5])
        self.assertEqual(sequence(5, 1).to_list(), [5, 4, 3, 2, 1])
        self.assertEqual(sequence(2, 2).to_list(), [2])

    def test_stops_at_or_before_end(self) -> None:
        from atomvec import ElementKind, sequence

        self.assertEqual(sequence(1, 10, 3).to_list(), [1, 4, 7, 10])
        self.assertEqual(sequence(1, 9, 3).to_list(), [1, 4, 7])
        fractional = sequence(1.5, 4)
        self.assertIs(fractional.kind, ElementKind.DOUBLE)
        self.assertEqual(fractional.to_list(), [1.5, 2.5, 3.5])

    def test_fractional_step_is_double(self) -> None:
        from atomvec import ElementKind, sequence

        quarters = sequence(0, 1, 0.25)
        self.assertIs(quarters.kind, ElementKind.DOUBLE)
        self.assertEqual(quarters.to_list(), [0.0, 0.25, 0.5, 0.75, 1.0])
        self.assertEqual(len(sequence(0, 1, 0.1)), 11)

        thirds = sequence(1, 2, 0.3).to_list()
        self.assertEqual(len(thirds), 4)
        for got, want in zip(thirds, [1.0, 1.3, 1.6, 1.9]):
            self.assertAlmostEqual(got, want)

    def test_zero_step(self) -> None:
        from atomvec import InvalidStepError, sequence

        with self.assertRaises(InvalidStepError):
            sequence(1, 5, 0)
        self.assertEqual(sequence(3, 3, 0).to_list(), [3])

    def test_step_pointing_away_from_end_is_rejected(self) -> None:
        from atomvec import InvalidStepError, sequence

        with self.assertRaises(InvalidStepError):
            sequence(1, 5, -1)
        with self.assertRaises(InvalidStepError):
            sequence(5, 1, 2)

    def test_non_finite_bounds_are_rejected(self) -> None:
        from atomvec import VectorArgumentError, sequence

        with self.assertRaises(VectorArgumentError):
            sequence(1, float("inf"))
        with self.assertRaises(VectorArgumentError):
            sequence("a", 3)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for vector construction tests")
class RepeatTests(unittest.TestCase):
    def test_repeats_whole_input_cycles(self) -> None:
        from atomvec import combine, repeat

        self.assertEqual(repeat(combine(1, 2), 3).to_list(), [1, 2, 1, 2, 1, 2])
        self.assertEqual(repeat("x", 2).to_list(), ["x", "x"])

    def test_each_repeats_elements_before_cycling(self) -> None:
        from atomvec import combine, repeat

        self.assertEqual(repeat(combine(1, 2), 2, each=2).to_list(), [1, 1, 2, 2, 1, 1, 2, 2])

    def test_zero_times_keeps_kind(self) -> None:
        from atomvec import ElementKind, repeat

        out = repeat(5, 0)
        self.assertEqual(len(out), 0)
        self.assertIs(out.kind, ElementKind.INTEGER)

    def test_names_are_repeated(self) -> None:
        from atomvec import combine, repeat

        out = repeat(combine({"a": 1, "b": 2}), 2)
        self.assertEqual(out.names, ("a", "b", "a", "b"))

    def test_invalid_counts(self) -> None:
        from atomvec import VectorArgumentError, repeat

        for times in (-1, 1.5, True, "2"):
            with self.subTest(times=times):
                with self.assertRaises(VectorArgumentError):
                    repeat(1, times)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for vector construction tests")
class AttributeTests(unittest.TestCase):
    def test_length_counts_elements(self) -> None:
        from atomvec import combine, length, sequence

        self.assertEqual(length(sequence(1, 10)), 10)
        self.assertEqual(length("hello"), 1)
        self.assertEqual(len(combine("ab", "cde")), 2)

    def test_set_names_pads_and_copies(self) -> None:
        from atomvec import combine, names, set_names

        base = combine(1, 2, 3)
        named = set_names(base, ["a", "b"])
        self.assertEqual(names(named), ("a", "b", ""))
        self.assertIsNone(names(base))
        self.assertIsNone(names(set_names(named, None)))

    def test_set_names_coerces_and_blanks_missing(self) -> None:
        from atomvec import combine, set_names

        named = set_names(combine(1, 2, 3), combine(10, None, 30))
        self.assertEqual(named.names, ("10", "", "30"))

    def test_set_names_rejects_longer_names(self) -> None:
        from atomvec import VectorLengthError, combine, set_names

        with self.assertRaises(VectorLengthError):
            set_names(combine(1, 2), ["a", "b", "c"])

    def test_is_na_and_identical(self) -> None:
        from atomvec import ElementKind, combine, identical, is_na

        flags = is_na(combine(1, None, 3))
        self.assertIs(flags.kind, ElementKind.LOGICAL)
        self.assertEqual(flags.to_list(), [False, True, False])

        self.assertTrue(identical(combine(1, None), combine(1, None)))
        self.assertTrue(identical(combine(float("nan")), combine(float("nan"))))
        self.assertFalse(identical(combine(1, 2), combine(1.0, 2.0)))
        self.assertFalse(identical(combine({"a": 1}), combine(1)))

    def test_as_kind_reports_lost_values(self) -> None:
        from atomvec import CoercionWarning, ElementKind, as_kind, combine

        with self.assertWarns(CoercionWarning):
            out = as_kind(combine("1", "x", "3.9"), ElementKind.INTEGER)
        self.assertIs(out.kind, ElementKind.INTEGER)
        self.assertEqual(out.to_list(), [1, None, 3])

        widened = as_kind(combine(True, 2), ElementKind.CHARACTER)
        self.assertEqual(widened.to_list(), ["1", "2"])


if __name__ == "__main__":
    unittest.main()
