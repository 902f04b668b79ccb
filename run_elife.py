import random
import time
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
from matplotlib.patches import Patch

from elife import (World, Wall, Plant, PlantEater, BouncingCritter,
                   TYPE_EMPTY, TYPE_CRITTER, char_from_element)

# --- CONFIGURATION ---

MAX_TURNS = 1000
TURN_INTERVAL = 1.0 # Seconds between turns when watching a run
CENSUS_INTERVAL = 10

VALLEY_PLAN = ["############################",
               "#####                 ######",
               "##   ***                **##",
               "#   *##**         **  O  *##",
               "#    ***     O    ##**    *#",
               "#       O         ##***    #",
               "#                 ##**     #",
               "#   O       #*             #",
               "#*          #**       O    #",
               "#***        ##**    O    **#",
               "##****     ###***       *###",
               "############################"]

DEFAULT_LEGEND = {'#': Wall, 'O': PlantEater, '*': Plant, 'o': BouncingCritter}

# --- SNAPSHOTS & CENSUS ---

def get_grid_snapshot(world):
    """Numeric copy of the grid: one type id per cell, rows are y."""
    grid = world.grid
    snapshot = np.full((grid.height, grid.width), TYPE_EMPTY, dtype=np.int8)
    for element, vector in grid:
        snapshot[vector.y, vector.x] = element.type_id
    return snapshot

def count_population(world):
    counts = {}
    for element, _ in world.grid:
        ch = char_from_element(element)
        counts[ch] = counts.get(ch, 0) + 1
    return counts

class Visualizer:
    def __init__(self, width, height):
        self.width = width
        self.height = height

        # Colors: Empty(0)=White, Wall(1)=Black, Plant(2)=Green, PlantEater(3)=Red, Critter(4)=Blue
        self.cmap = ListedColormap(['white', 'black', 'green', 'red', 'blue'])
        self.norm = plt.Normalize(vmin=TYPE_EMPTY, vmax=TYPE_CRITTER)

        plt.ion()
        self.fig, self.ax = plt.subplots(figsize=(8, 4))
        self.img = self.ax.imshow(np.zeros((height, width)), cmap=self.cmap, norm=self.norm, interpolation='nearest')
        self.ax.set_title("Electronic Life")
        self.ax.axis('off')

        legend_elements = [
            Patch(facecolor='white', edgecolor='gray', label='Empty'),
            Patch(facecolor='black', edgecolor='gray', label='Wall'),
            Patch(facecolor='green', edgecolor='gray', label='Plant'),
            Patch(facecolor='red', edgecolor='gray', label='PlantEater'),
            Patch(facecolor='blue', edgecolor='gray', label='Critter')
        ]
        self.ax.legend(handles=legend_elements, loc='upper right', bbox_to_anchor=(1.3, 1))
        plt.tight_layout()

    def update(self, world):
        self.img.set_data(get_grid_snapshot(world))
        self.ax.set_title(f"Electronic Life - turn {world.turn_count}")
        self.fig.canvas.draw()
        self.fig.canvas.flush_events()

    def close(self):
        plt.close(self.fig)

def plot_population_history(history, output_file='population_history.png'):
    fig, ax = plt.subplots(figsize=(10, 6))
    for ch, counts in history.items():
        if ch == 'turns':
            continue
        ax.plot(history['turns'], counts, label=repr(ch), linewidth=2)
    ax.set_xlabel('Turn')
    ax.set_ylabel('Population')
    ax.set_title('Population over time')
    ax.grid(True, linestyle='--', alpha=0.7)
    ax.legend()
    fig.savefig(output_file)
    plt.close(fig)
    print(f"Population plot saved to {output_file}")
    return output_file

# --- MAIN RUNNER ---

def run_simulation(plan=VALLEY_PLAN, legend=None, max_turns=MAX_TURNS, seed=None,
                   visualize=False, echo=False, interval=0.0, step_callback=None):
    if legend is None:
        legend = DEFAULT_LEGEND

    rng = random.Random(seed) if seed is not None else None
    if seed is not None:
        random.seed(seed)
        np.random.seed(seed)

    world = World(plan, legend, rng=rng)
    vis = None
    if visualize:
        vis = Visualizer(world.grid.width, world.grid.height)

    # One census column per character the run can produce
    history = {'turns': []}
    for ch in legend:
        history[ch] = []

    t = 0
    try:
        for t in range(1, max_turns + 1):
            world.turn()

            if step_callback:
                step_callback(t, world)

            if echo:
                print(world.to_string(), flush=True)

            extinct = not world.critters()

            if t % CENSUS_INTERVAL == 0 or t == max_turns or extinct:
                counts = count_population(world)
                history['turns'].append(t)
                for ch in legend:
                    history[ch].append(counts.get(ch, 0))
                if echo:
                    summary = " ".join(f"{ch!r}={counts.get(ch, 0)}" for ch in legend)
                    print(f"Turn {t}: {summary}", flush=True)

            if vis:
                vis.update(world)

            if extinct:
                if echo: print("Extinction event.")
                return t, history

            if interval > 0:
                time.sleep(interval)

        return max_turns, history

    except KeyboardInterrupt:
        print("Simulation stopped by user.")
        return t, history
    finally:
        if vis:
            vis.close()

if __name__ == "__main__":
    turns, history = run_simulation(visualize=True, echo=True, interval=TURN_INTERVAL)
    plot_population_history(history)
