"""
Test: interchangeable linear system backends.

The default JAX LU backend and the exact sympy backend must agree on
well-conditioned systems, and both must report singular systems.
"""
import pytest


def _ladder():
    from pycompanion.mna import resistor, battery, current_source

    return (
        battery("0", "1", 12.0),
        resistor("1", "2", 3.0),
        resistor("2", "0", 6.0),
        resistor("2", "3", 2.0),
        resistor("3", "0", 4.0),
        current_source("0", "3", 0.5),
    )


class TestBackendsAgree:
    @pytest.mark.parametrize("name", ["jax", "sympy"])
    def test_divider(self, name):
        from pycompanion.mna import MNACircuit, resistor, battery

        b = battery("0", "1", 10.0)
        r1 = resistor("1", "2", 1.0)
        r2 = resistor("2", "0", 4.0)
        solution = MNACircuit((b, r1, r2), ground="0").solve(name)

        assert abs(solution.node_voltage("2") - 8.0) < 1e-12
        assert abs(solution.current(b) - 2.0) < 1e-12

    def test_ladder(self):
        from pycompanion.mna import MNACircuit

        circuit = MNACircuit(_ladder(), ground="0")
        numeric = circuit.solve("jax")
        exact = circuit.solve("sympy")

        assert numeric.approx_equals(exact, atol=1e-10)
        for node in circuit.nodes:
            assert abs(numeric.node_voltage(node) - exact.node_voltage(node)) < 1e-10

    def test_backend_instance_is_accepted(self):
        from pycompanion.mna import MNACircuit, SympyExactBackend

        exact = MNACircuit(_ladder(), ground="0").solve(SympyExactBackend())
        assert exact.node_voltage("1") == 12.0


class TestStampedSolve:
    @pytest.mark.parametrize("name", ["jax", "sympy"])
    def test_duplicate_stamps_are_summed(self, name):
        from pycompanion.mna import Stamps, get_backend, solve_stamps

        # [[2, 0], [0, 4]] x = [2, 8], entries split over repeated positions
        stamps = Stamps(2, (0, 0, 1, 1), (0, 0, 1, 1), (1.0, 1.0, 3.0, 1.0), (0, 1, 1), (2.0, 5.0, 3.0))
        x = solve_stamps(get_backend(name), stamps)
        assert x == pytest.approx([1.0, 2.0], abs=1e-12)

    @pytest.mark.parametrize("name", ["jax", "sympy"])
    def test_singular_stamps(self, name):
        from pycompanion import SingularMatrix
        from pycompanion.mna import Stamps, get_backend, solve_stamps

        stamps = Stamps(2, (0, 0, 1, 1), (0, 1, 0, 1), (1.0, -1.0, -1.0, 1.0), (0,), (1.0,))
        with pytest.raises(SingularMatrix):
            solve_stamps(get_backend(name), stamps)

    def test_empty_stamps(self):
        from pycompanion.mna import Stamps, JaxLUBackend

        assert JaxLUBackend().solve_stamped(Stamps(0, (), (), (), (), ())) == []

    def test_compiled_kernel_is_reused_across_solves(self):
        from pycompanion.mna import MNACircuit, resistor, battery
        from pycompanion.mna.backend import _stamped_kernel

        circuit = MNACircuit((battery("0", "1", 2.0), resistor("1", "2", 1.0), resistor("2", "0", 1.0)), ground="0")
        circuit.solve()
        hits = _stamped_kernel.cache_info().hits
        for _ in range(3):
            circuit.solve()
        assert _stamped_kernel.cache_info().hits == hits + 3


class TestSingularSystems:
    @pytest.mark.parametrize("name", ["jax", "sympy"])
    def test_zero_matrix(self, name):
        import jax.numpy as jnp
        from pycompanion import SingularMatrix
        from pycompanion.mna import get_backend

        with pytest.raises(SingularMatrix):
            get_backend(name).solve_linear_system(jnp.zeros((2, 2)), jnp.ones(2))

    @pytest.mark.parametrize("name", ["jax", "sympy"])
    def test_rank_deficient_matrix(self, name):
        import jax.numpy as jnp
        from pycompanion import SingularMatrix
        from pycompanion.mna import get_backend

        A = jnp.array([[1.0, -1.0], [-1.0, 1.0]])
        with pytest.raises(SingularMatrix):
            get_backend(name).solve_linear_system(A, jnp.array([1.0, 0.0]))

    @pytest.mark.parametrize("name", ["jax", "sympy"])
    def test_empty_system(self, name):
        import jax.numpy as jnp
        from pycompanion.mna import get_backend

        x = get_backend(name).solve_linear_system(jnp.zeros((0, 0)), jnp.zeros(0))
        assert x.shape == (0,)


class TestGetBackend:
    def test_default_is_jax(self):
        from pycompanion.mna import get_backend, JaxLUBackend

        assert isinstance(get_backend(), JaxLUBackend)
        assert get_backend("jax") == JaxLUBackend()

    def test_unknown_name(self):
        from pycompanion.mna import get_backend

        with pytest.raises(ValueError):
            get_backend("lapack")

    def test_not_a_backend(self):
        from pycompanion.mna import get_backend

        with pytest.raises(TypeError):
            get_backend(42)

    def test_custom_backend(self):
        """Anything with solve_linear_system can stand in."""
        import jax.numpy as jnp
        from pycompanion.mna import MNACircuit, resistor, battery, get_backend

        class Counting:
            name = "counting"

            def __init__(self):
                self.calls = 0

            def solve_linear_system(self, A, b):
                self.calls += 1
                return jnp.linalg.solve(A, b)

        backend = Counting()
        assert get_backend(backend) is backend

        solution = MNACircuit((battery("0", "1", 2.0), resistor("1", "0", 1.0)), ground="0").solve(backend)
        assert backend.calls == 1
        assert abs(solution.node_voltage("1") - 2.0) < 1e-12

    def test_custom_backend_with_consistent_loop(self):
        """Redundant loop constraints never reach the backend."""
        import jax.numpy as jnp
        from pycompanion.mna import MNACircuit, resistor, battery

        class Recording:
            name = "recording"

            def __init__(self):
                self.sizes = []

            def solve_linear_system(self, A, b):
                self.sizes.append(A.shape[0])
                return jnp.linalg.solve(A, b)

        backend = Recording()
        b1, b2 = battery("0", "1", 9.0), battery("0", "1", 9.0)
        solution = MNACircuit((b1, b2, resistor("1", "0", 3.0)), ground="0").solve(backend)
        # one node voltage plus one battery current
        assert backend.sizes == [2]
        assert abs(solution.current(b1) + solution.current(b2) - 3.0) < 1e-12


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
