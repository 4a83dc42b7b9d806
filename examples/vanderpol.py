import matplotlib.pyplot as plt

from phasefield import System, locate
from phasefield.plot import phase_portrait
from phasefield.runtime.config import TrajectoryConfig


system = System.from_formulas("y", "a*(1 - x^2)*y - x", a=1.0, label="Van der Pol")

res = locate(system)
for fp in res:
    print(f"({fp.x:.4f}, {fp.y:.4f})  {fp.stability}")

phase_portrait(system,
               grid=25,
               trajectories=TrajectoryConfig(n=8, steps=1100),
               )
plt.show()
