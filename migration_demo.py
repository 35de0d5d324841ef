'''
Track the semi-major axis range of a planet migrating inward
while it is perturbed by an outer companion.
'''
import numpy as np
import plotly.io as pio
from epikyklos import Simulation, History
from epikyklos.utils import Timer

pio.renderers.default = 'browser'

sim = Simulation(G=1.0, dt=0.01)
sim.add(m=1.0, name="star")
# inner planet, bounds seeded with its starting semi-major axis
sim.add(m=1e-4, a=1.0, e=0.02, min_a=1.0, max_a=1.0, tau_a=-2.0e3, name="inner")
# outer companion, not tracked
sim.add(m=1e-3, a=2.2, e=0.05, nu=np.pi, name="outer")

sim.extras.add_operator("modify_orbits_direct")
sim.extras.add_operator("track_minmax_a")

hist = History(particles=[1])
with Timer("Integration"):
    sim.integrate(200.0, history=hist)

print(sim)
print(f"min_a = {sim[1].min_a:.8f}, max_a = {sim[1].max_a:.8f}")
hist.plot(1).show()
