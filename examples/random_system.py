import warnings

import matplotlib.pyplot as plt

from phasefield import ParticleField, ParticleConfig, random_system
from phasefield.plot import phase_portrait

# Random systems are often undefined in parts of the plane
warnings.simplefilter("ignore", RuntimeWarning)

system = random_system(seed=2024)
print("dx =", system.dx)
print("dy =", system.dy)

pf = ParticleField(system, ParticleConfig(n_particles=4000), seed=0)
pf.run(200)

handle = phase_portrait(system, grid=20, color="0.6")
handle.ax.scatter(pf.state.x, pf.state.y, s=0.5, c=pf.state.speed, cmap="viridis")
plt.show()
