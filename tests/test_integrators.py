import unittest

import numpy as np

from radiobio.errors import IntegrationError, UnknownSpeciesError
from radiobio.integrators import integrate_rk4, number_of_steps, rk4_step


class TestRK4(unittest.TestCase):
    def test_single_step_matches_fourth_order_taylor(self):
        # dy/dt = -lambda y
        lam = 2.0
        h = 0.1
        y0 = 1.5
        result = integrate_rk4(lambda t, y: -lam * y, 0.0, np.array([y0]), h, h)

        z = lam * h
        expected = y0 * (1.0 - z + z**2 / 2.0 - z**3 / 6.0 + z**4 / 24.0)
        self.assertEqual(result.stats.accepted_steps, 1)
        self.assertAlmostEqual(result.y[0, -1], expected, places=12)

    def test_decay_accuracy(self):
        result = integrate_rk4(lambda t, y: -y, 0.0, np.array([1.0]), 1.0, 0.01)
        self.assertAlmostEqual(result.final_state[0], np.exp(-1.0), places=9)

    def test_time_dependent_rhs(self):
        # dy/dt = 3 t^2 is integrated exactly
        result = integrate_rk4(lambda t, y: np.array([3.0 * t**2]), 0.0, np.array([0.0]), 2.0, 0.5)
        self.assertAlmostEqual(result.final_state[0], 8.0, places=12)

    def test_records_every_step(self):
        result = integrate_rk4(lambda t, y: -y, 0.0, np.array([1.0, 2.0]), 1.0, 0.25)
        self.assertEqual(result.t.shape, (5,))
        self.assertEqual(result.y.shape, (2, 5))
        np.testing.assert_allclose(result.t, [0.0, 0.25, 0.5, 0.75, 1.0])
        np.testing.assert_array_equal(result.y[:, 0], [1.0, 2.0])
        self.assertEqual(result.stats.accepted_steps, 4)
        self.assertEqual(result.stats.num_eval, 16)

    def test_last_step_overshoots_end_time(self):
        # ceil(1.0 / 0.3) = 4 steps; the trajectory ends past t_end
        self.assertEqual(number_of_steps(0.0, 1.0, 0.3), 4)
        result = integrate_rk4(lambda t, y: np.zeros_like(y), 0.0, np.array([1.0]), 1.0, 0.3)
        self.assertEqual(len(result.t), 5)
        self.assertAlmostEqual(result.t[-1], 1.2)
        self.assertGreater(result.t[-1], 1.0)
        self.assertLess(result.t[-1] - 1.0, 0.3)

    def test_empty_interval(self):
        result = integrate_rk4(lambda t, y: -y, 1.0, np.array([1.0, 2.0]), 1.0, 0.1)
        np.testing.assert_array_equal(result.t, [1.0])
        self.assertEqual(result.y.shape, (2, 1))
        self.assertEqual(result.stats.num_eval, 0)

    def test_states_are_non_negative(self):
        result = integrate_rk4(
            lambda t, y: np.array([-10.0, 1.0]), 0.0, np.array([1.0, 0.0]), 1.0, 0.2
        )
        self.assertTrue(np.all(result.y >= 0.0))
        self.assertEqual(result.final_state[0], 0.0)

    def test_step_clamps_before_next_stage(self):
        y_new = rk4_step(lambda t, y: np.array([-5.0]), 0.0, np.array([1.0]), 1.0)
        np.testing.assert_array_equal(y_new, [0.0])

    def test_rhs_failure_aborts_integration(self):
        calls = []

        def rhs(t, y):
            calls.append(t)
            if t >= 0.25:
                raise UnknownSpeciesError("X", "X -> Y")
            return -y

        with self.assertRaises(IntegrationError) as ctx:
            integrate_rk4(rhs, 0.0, np.array([1.0]), 1.0, 0.2)

        # step from t=0.2 fails at its second stage (t=0.3)
        self.assertAlmostEqual(ctx.exception.time, 0.2)
        self.assertIsInstance(ctx.exception.cause, UnknownSpeciesError)
        self.assertIsInstance(ctx.exception.__cause__, UnknownSpeciesError)
        self.assertEqual(ctx.exception.context["species"], "X")
        self.assertEqual(len(calls), 6)

    def test_invalid_step_size(self):
        with self.assertRaises(ValueError):
            integrate_rk4(lambda t, y: y, 0.0, np.array([1.0]), 1.0, 0.0)
        with self.assertRaises(ValueError):
            integrate_rk4(lambda t, y: y, 0.0, np.array([1.0]), float("inf"), 0.1)


if __name__ == '__main__':
    unittest.main()
