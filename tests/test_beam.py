import unittest

from radiobio.beam import Beam, TimeStructure, beam_from_config
from radiobio.errors import BuildError


class TestBeam(unittest.TestCase):
    def test_constant_beam(self):
        beam = Beam.constant("e", 2.0)
        self.assertEqual(beam.structure.duty_cycle, 1.0)
        self.assertEqual(beam.peak_dose_rate, 2.0)
        for t in (0.0, 1e-6, 3.7, 1e4):
            self.assertEqual(beam.dose_rate_at(t), 2.0)
            self.assertEqual(beam(t), 2.0)

    def test_pulsed_beam(self):
        beam = Beam.pulsed("e", dose_rate=1e6, period=250e-6, on_time=1e-6)
        self.assertAlmostEqual(beam.structure.duty_cycle, 0.004)
        self.assertAlmostEqual(beam.peak_dose_rate / 2.5e8, 1.0)
        self.assertAlmostEqual(beam.average_dose_rate, 1e6)

        self.assertEqual(beam.dose_rate_at(0.0), beam.peak_dose_rate)
        self.assertEqual(beam.dose_rate_at(0.5e-6), beam.peak_dose_rate)
        self.assertEqual(beam.dose_rate_at(100e-6), 0.0)
        self.assertEqual(beam.dose_rate_at(250.5e-6), beam.peak_dose_rate)

    def test_on_time_longer_than_period(self):
        with self.assertRaises(BuildError) as ctx:
            Beam.pulsed("e", dose_rate=1.0, period=1e-6, on_time=2e-6)
        self.assertIn("on_time", str(ctx.exception))

    def test_invalid_values(self):
        with self.assertRaises(BuildError):
            TimeStructure.pulsed(0.0, 0.0)
        with self.assertRaises(BuildError):
            Beam.constant("e", -1.0)


class TestBeamFromConfig(unittest.TestCase):
    def test_constant_is_default(self):
        beam = beam_from_config({"dose_rate": 2.0})
        self.assertTrue(beam.structure.is_constant)
        self.assertEqual(beam.particle, "e")

    def test_pulsed(self):
        beam = beam_from_config(
            {"type": "pulsed", "particle": "p", "dose_rate": 1.0, "period": 2.0, "on_time": 0.5}
        )
        self.assertEqual(beam.particle, "p")
        self.assertEqual(beam.peak_dose_rate, 4.0)

    def test_errors(self):
        with self.assertRaises(BuildError):
            beam_from_config({"type": "pulsed", "dose_rate": 1.0, "period": 2.0})
        with self.assertRaises(BuildError):
            beam_from_config({"type": "laser", "dose_rate": 1.0})
        with self.assertRaises(BuildError):
            beam_from_config({"dose_rate": "high"})


if __name__ == '__main__':
    unittest.main()
