import unittest

from radiobio.errors import UnknownSpeciesError
from radiobio.kinetics import ge_to_kr, mass_action_rate, radiolytic_rate, reaction_rate
from radiobio.models import RadiolyticReaction, RateReaction, collapse_stoichiometry


class TestKinetics(unittest.TestCase):
    def test_ge_to_kr_reference_values(self):
        # Kr in mol/l/Gy for Ge in molecules / 100 eV
        for ge, kr in [(2.80, 2.9020e-07), (0.62, 6.4258e-08), (0.47, 4.8712e-08), (0.73, 7.5659e-08)]:
            self.assertAlmostEqual(ge_to_kr(ge) / kr, 1.0, places=4)

    def test_effective_k_divides_by_distinct_reactants(self):
        reaction = RateReaction(
            reactants=collapse_stoichiometry(["A", "B"]),
            products=collapse_stoichiometry(["C"]),
            k_value=4.0,
        )
        self.assertEqual(reaction.effective_k, 2.0)

        dimer = RateReaction(
            reactants=collapse_stoichiometry(["A", "A"]),
            products=collapse_stoichiometry(["B"]),
            k_value=2.0,
        )
        self.assertEqual(dimer.reactants, (("A", 2),))
        self.assertEqual(dimer.effective_k, 2.0)

    def test_mass_action_uses_stoichiometric_exponents(self):
        # r = (k / 1) * C_A^2
        dimer = RateReaction(reactants=(("A", 2),), products=(("B", 1),), k_value=2.0)
        self.assertAlmostEqual(mass_action_rate(dimer, {"A": 3.0}), 18.0)

        # r = (k / 2) * C_A * C_B
        mixed = RateReaction(reactants=(("A", 1), ("B", 1)), products=(), k_value=4.0)
        self.assertAlmostEqual(mass_action_rate(mixed, {"A": 2.0, "B": 3.0}), 12.0)

    def test_missing_reactant_is_an_error(self):
        reaction = RateReaction(reactants=(("A", 1), ("B", 1)), products=(), k_value=1.0)
        with self.assertRaises(UnknownSpeciesError) as ctx:
            mass_action_rate(reaction, {"A": 1.0})
        self.assertEqual(ctx.exception.label, "B")
        self.assertIn("A + B ->", str(ctx.exception))

    def test_radiolytic_rate_ignores_concentrations(self):
        reaction = RadiolyticReaction(product="e_aq", ge_value=2.8, kr=ge_to_kr(2.8))
        self.assertAlmostEqual(radiolytic_rate(reaction, 2.0), 2.0 * reaction.kr)
        self.assertAlmostEqual(reaction_rate(reaction, {}, 2.0), 2.0 * reaction.kr)
        self.assertEqual(reaction_rate(reaction, {}, 0.0), 0.0)

    def test_unsupported_reaction_type(self):
        with self.assertRaises(TypeError):
            reaction_rate("A -> B", {}, 1.0)

    def test_equation_formatting(self):
        reaction = RateReaction(
            reactants=collapse_stoichiometry(["OH", "OH"]),
            products=collapse_stoichiometry(["H2O2"]),
            k_value=5.5e9,
        )
        self.assertEqual(reaction.equation(), "2 OH -> H2O2")


if __name__ == '__main__':
    unittest.main()
