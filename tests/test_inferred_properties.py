from __future__ import annotations

import importlib.util
import unittest
from concurrent.futures import ThreadPoolExecutor


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for inferred-property tests")
class InferredPropertiesTests(unittest.TestCase):
    def test_coercion_closure(self) -> None:
        from atomvec import ElementKind, coerce, combine, highest_kind
        from atomvec.lattice import kind_of_scalar

        cases = [
            (1, "a"),
            (True, 2.5),
            (False, 3, None),
            ("x", None, 7.25, True),
        ]
        for values in cases:
            with self.subTest(values=values):
                out = combine(*values)
                kind = highest_kind(kind_of_scalar(value) for value in values)
                self.assertIs(out.kind, kind)
                expected = [None if value is None else coerce(value, kind) for value in values]
                self.assertEqual(out.to_list(), expected)

        self.assertEqual(combine(1, "a").to_list(), ["1", "a"])
        self.assertIs(combine(1, "a").kind, ElementKind.CHARACTER)

    def test_extraction_is_copy_independent(self) -> None:
        from atomvec import assign, combine, extract

        source = combine({"a": 1, "b": 2, "c": 3})
        piece = extract(source, [1, 2])
        assign(piece, [1], "changed")
        assign(piece, [5], 0)
        self.assertEqual(source.to_list(), [1, 2, 3])
        self.assertEqual(source.names, ("a", "b", "c"))

    def test_negative_index_complement_law(self) -> None:
        from atomvec import combine, extract

        values = [4.5, 1.0, 9.0, 2.5, 7.0]
        v = combine(*values)
        for k in range(1, len(values) + 1):
            with self.subTest(k=k):
                out = extract(v, [-k])
                self.assertEqual(len(out), len(values) - 1)
                self.assertEqual(out.to_list(), values[: k - 1] + values[k:])

    def test_recycling_law(self) -> None:
        from atomvec import binary_op, combine

        v1 = [1, 3, 5, 8]
        v2 = [1, 2]
        out = binary_op("+", combine(*v1), combine(*v2))
        self.assertEqual(len(out), 4)
        self.assertEqual(out.to_list(), [v1[i] + v2[i % 2] for i in range(4)])
        self.assertEqual(out.to_list(), [2, 5, 6, 10])

    def test_logical_filter_law(self) -> None:
        from atomvec import binary_op, combine, extract

        values = [7, 6.5, 4, 11, 8]
        for t in (6.5, 0, 100, 8):
            with self.subTest(t=t):
                v = combine(*values)
                out = extract(v, binary_op(">", v, t))
                self.assertEqual(out.to_list(), [x for x in values if x > t])
                self.assertEqual(extract(v, v > t).to_list(), [x for x in values if x > t])

    def test_growth_on_write(self) -> None:
        from atomvec import assign, combine

        v = combine(1.5, 2.5, 3.5)
        assign(v, [5], 9.5)
        self.assertEqual(len(v), 5)
        self.assertIsNone(v.to_list()[3])

    def test_name_lookup_first_match(self) -> None:
        from atomvec import combine, extract, set_names

        v = set_names(combine(10, 20, 30, 40), ["p", "x", "q", "x"])
        self.assertEqual(extract(v, ["x"]).to_list(), [20])

    def test_out_of_range_read_yields_missing(self) -> None:
        from atomvec import combine, extract

        for v in (combine(1, 2), combine(1.5), combine("a", "b", "c"), combine(True)):
            with self.subTest(kind=v.kind):
                out = extract(v, [len(v) + 1])
                self.assertEqual(out.to_list(), [None])
                self.assertIs(out.kind, v.kind)

    def test_concurrent_reads_agree(self) -> None:
        from atomvec import binary_op, combine, extract, sequence

        v = sequence(1, 200)
        expected_slice = extract(v, [-1]).to_list()
        expected_sum = binary_op("+", v, combine(1, 2)).to_list()

        def work(_):
            return extract(v, [-1]).to_list(), binary_op("+", v, combine(1, 2)).to_list()

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(work, range(8)))
        for sliced, summed in results:
            self.assertEqual(sliced, expected_slice)
            self.assertEqual(summed, expected_sum)


if __name__ == "__main__":
    unittest.main()
