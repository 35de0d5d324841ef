"""Shared fixtures for the Epikyklos test suite."""

import pytest
from epikyklos import Simulation, config


@pytest.fixture(autouse=True)
def quiet_config():
    """Silence compile messages and restore config after every test."""
    config.VERBOSE = False
    yield
    config.reset()


@pytest.fixture
def kepler_sim():
    """Unit primary with one massless particle on a circular a=1 orbit."""
    sim = Simulation(G=1.0, dt=0.01)
    sim.add(m=1.0)
    sim.add(a=1.0)
    return sim
