import logging
import os

import matplotlib.pyplot as plt
import numpy as np

from fislib import load_system

logging.basicConfig(level=logging.INFO)

# Load the tutorial system: three inputs rated on a bad / ok / perfect scale
sim = load_system(os.path.join(os.path.dirname(__file__), 'weather.json'))

# Visualize these universes and membership functions
curves = {}
for variable, label, u, mu in sim.model.curves():
    curves.setdefault(variable, {}).setdefault(label, []).append((u, mu))

fig, axes = plt.subplots(nrows=len(curves), figsize=(8, 2.5 * len(curves)))
for ax, (variable, labels) in zip(axes, curves.items()):
    for label, points in labels.items():
        u, mu = np.array(points).T
        ax.plot(u, mu, linewidth=1.5, label=label)
    ax.set_title(variable)
    ax.legend()
    ax.spines['top'].set_visible(False)
    ax.spines['right'].set_visible(False)
plt.tight_layout()

# %% Example 1: warm, dry, some rain
example_1 = {'temperature': 75, 'humidity': 0, 'precipitation': 70}
value, aggregate, activation = sim.compute(example_1, method='centroid')
print('example 1 centroid: %.2f' % value)
print('example 1 largest of maxima: %.2f' % aggregate.defuzzify('largestofmax'))

# %% Example 2: same but cold
example_2 = dict(example_1, temperature=30)
value_2, aggregate_2, activation_2 = sim.compute(example_2, method='largestofmax')
print('example 2 largest of maxima: %.2f' % value_2)

fig, ax = plt.subplots(figsize=(8, 3))
for fuzzy_set, crisp, level, colour in [(aggregate, value, activation, 'Orange'),
                                        (aggregate_2, value_2, activation_2, 'SteelBlue')]:
    u, mu = np.array(list(fuzzy_set.points())).T
    ax.fill_between(u, np.zeros_like(u), mu, facecolor=colour, alpha=0.7)
    ax.plot([crisp, crisp], [0, level], 'k', linewidth=1.5, alpha=0.9)
ax.set_title('Aggregated membership and result (line)')
ax.set_xlabel('weather')

# %% Control surface over temperature and precipitation at fixed humidity
grid, z = sim.sweep([1.0, 0.0, 1.0], [100.0, 0.0, 100.0], [40, 1, 40], default=0.0)
fig, ax = plt.subplots(figsize=(6, 5))
contour = ax.tricontourf(grid[:, 0], grid[:, 2], z, levels=20)
fig.colorbar(contour, ax=ax, label='weather')
ax.set_xlabel('temperature')
ax.set_ylabel('precipitation')

plt.show()
