from __future__ import annotations

import importlib.util
import unittest
import warnings
from unittest import mock


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for recycling tests")
class AlignTests(unittest.TestCase):
    def test_exact_multiple_has_no_warning(self) -> None:
        from atomvec import align

        alignment = align(4, 2)
        self.assertEqual(alignment.length, 4)
        self.assertIsNone(alignment.warning)
        self.assertEqual(alignment.indices_a().tolist(), [0, 1, 2, 3])
        self.assertEqual(alignment.indices_b().tolist(), [0, 1, 0, 1])
        self.assertEqual([alignment.index_b(i) for i in range(4)], [0, 1, 0, 1])

    def test_shorter_operand_may_come_first(self) -> None:
        from atomvec import align

        alignment = align(3, 6)
        self.assertEqual(alignment.length, 6)
        self.assertEqual([alignment.index_a(i) for i in range(6)], [0, 1, 2, 0, 1, 2])

    def test_non_multiple_carries_warning(self) -> None:
        from atomvec import RecycleLengthWarning, align

        alignment = align(5, 2)
        self.assertEqual(alignment.length, 5)
        self.assertIsInstance(alignment.warning, RecycleLengthWarning)
        with self.assertWarns(RecycleLengthWarning):
            alignment.emit()

    def test_emit_without_warning_is_silent(self) -> None:
        from atomvec import align

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            align(2, 2).emit()

    def test_zero_lengths(self) -> None:
        from atomvec import IncompatibleLengthError, align

        empty = align(0, 0)
        self.assertEqual(empty.length, 0)
        self.assertEqual(empty.indices_a().tolist(), [])
        with self.assertRaises(IncompatibleLengthError):
            align(0, 3)
        with self.assertRaises(IncompatibleLengthError):
            align(3, 0)

    def test_invalid_lengths(self) -> None:
        from atomvec import VectorArgumentError, align

        with self.assertRaises(VectorArgumentError):
            align(-1, 2)

    def test_align_many(self) -> None:
        from atomvec import RecycleLengthWarning, align_many

        alignment = align_many(6, 2, 3)
        self.assertEqual(alignment.length, 6)
        self.assertIsNone(alignment.warning)
        self.assertEqual(alignment.indices(2).tolist(), [0, 1, 2, 0, 1, 2])
        self.assertIsInstance(align_many(6, 4).warning, RecycleLengthWarning)

    def test_strict_mode_raises(self) -> None:
        from atomvec import IncompatibleLengthError, align, recycling

        with mock.patch.object(recycling, "_STRICT_RECYCLING", True):
            with self.assertRaises(IncompatibleLengthError):
                align(5, 2)
            self.assertIsNone(align(4, 2).warning)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for recycling tests")
class RecycleToTests(unittest.TestCase):
    def test_target_length_is_fixed(self) -> None:
        from atomvec import RecycleLengthWarning, recycle_to

        exact = recycle_to(4, 2)
        self.assertEqual(exact.length, 4)
        self.assertIsNone(exact.warning)

        for target, source in ((4, 3), (2, 3)):
            with self.subTest(target=target, source=source):
                self.assertIsInstance(recycle_to(target, source).warning, RecycleLengthWarning)

    def test_zero_lengths(self) -> None:
        from atomvec import IncompatibleLengthError, recycle_to

        self.assertEqual(recycle_to(0, 0).length, 0)
        self.assertEqual(recycle_to(0, 3).length, 0)
        with self.assertRaises(IncompatibleLengthError):
            recycle_to(3, 0)


if __name__ == "__main__":
    unittest.main()
