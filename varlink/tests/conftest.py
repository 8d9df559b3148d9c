import pytest
from varlink.core.config import OracleConfig
from varlink.fexpr import FeatureExprFactory, SatOracle

@pytest.fixture
def factory():
    return FeatureExprFactory(SatOracle(OracleConfig(solver_name="m22")))

@pytest.fixture
def abc(factory):
    return factory.feature("A"), factory.feature("B"), factory.feature("C")
