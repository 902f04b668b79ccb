import random
from collections import namedtuple
from types import MappingProxyType

# --- CONFIGURATION & CONSTANTS ---

# Energy economy
GROW_ENERGY = 0.5
MOVE_COST = 1.0
PENALTY_COST = 0.2 # Charged when an action is missing or fails

PLANT_BASE_ENERGY = 3.0
PLANT_ENERGY_SPREAD = 4.0 # New plants start with 3..7 energy
PLANT_REPRODUCE_THRESHOLD = 15.0
PLANT_GROW_LIMIT = 20.0

PLANT_EATER_ENERGY = 20.0
PLANT_EATER_REPRODUCE_THRESHOLD = 60.0

# Map characters
EMPTY_CHAR = ' '
WALL_CHAR = '#'
PLANT_CHAR = '*'
PLANT_EATER_CHAR = 'O'
CRITTER_CHAR = 'o'
DEFAULT_DIRECTION = 's' # Where a boxed-in BouncingCritter keeps pushing

# Object Types IDs (used by numeric snapshots)
TYPE_EMPTY = 0
TYPE_WALL = 1
TYPE_PLANT = 2
TYPE_PLANT_EATER = 3
TYPE_CRITTER = 4

# Action types
ACTION_GROW = 'grow'
ACTION_MOVE = 'move'
ACTION_EAT = 'eat'
ACTION_REPRODUCE = 'reproduce'

# --- VECTORS & DIRECTIONS ---

class Vector(namedtuple('Vector', ['x', 'y'])):
    __slots__ = ()

    def plus(self, other):
        return Vector(self.x + other.x, self.y + other.y)

# Compass order matters: View.find_all reports directions in this order
DIRECTION_NAMES = ('n', 'ne', 'e', 'se', 's', 'sw', 'w', 'nw')

DIRECTIONS = MappingProxyType({
    'n':  Vector( 0, -1),
    'ne': Vector( 1, -1),
    'e':  Vector( 1,  0),
    'se': Vector( 1,  1),
    's':  Vector( 0,  1),
    'sw': Vector(-1,  1),
    'w':  Vector(-1,  0),
    'nw': Vector(-1, -1),
})

# --- GRID ---

class Grid:
    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.space = [None] * (width * height)

    def is_inside(self, vector):
        return 0 <= vector.x < self.width and 0 <= vector.y < self.height

    def _index(self, vector):
        if not self.is_inside(vector):
            raise IndexError(f"{vector} is outside the {self.width}x{self.height} grid")
        return vector.x + self.width * vector.y

    def get(self, vector):
        return self.space[self._index(vector)]

    def set(self, vector, value):
        self.space[self._index(vector)] = value

    def __iter__(self):
        # Cells are read live: anything emptied before we reach it is skipped
        for y in range(self.height):
            for x in range(self.width):
                value = self.space[x + self.width * y]
                if value is not None:
                    yield value, Vector(x, y)

    def for_each(self, fn):
        for value, vector in self:
            fn(value, vector)

# --- ACTIONS ---

class Action(namedtuple('Action', ['type', 'direction'])):
    """A proposed effect. Direction is a compass name, None for grow."""
    __slots__ = ()

    def __new__(cls, type, direction=None):
        return super().__new__(cls, type, direction)

    @classmethod
    def grow(cls):
        return cls(ACTION_GROW)

    @classmethod
    def move(cls, direction):
        return cls(ACTION_MOVE, direction)

    @classmethod
    def eat(cls, direction):
        return cls(ACTION_EAT, direction)

    @classmethod
    def reproduce(cls, direction):
        return cls(ACTION_REPRODUCE, direction)

# --- ENTITIES ---

class Entity:
    char = EMPTY_CHAR
    type_id = TYPE_EMPTY

    def __init__(self, rng=None):
        self.origin_char = self.char
        self.energy = None # None means the entity has no energy economy

    def __repr__(self):
        return f"{type(self).__name__}(origin_char={self.origin_char!r}, energy={self.energy!r})"

class Wall(Entity):
    char = WALL_CHAR
    type_id = TYPE_WALL

class Critter(Entity):
    """An entity that picks one action per turn from what its View shows."""

    def decide(self, view):
        raise NotImplementedError

class BouncingCritter(Critter):
    char = CRITTER_CHAR
    type_id = TYPE_CRITTER

    def __init__(self, rng=None):
        super().__init__(rng)
        rng = rng if rng is not None else random
        self.direction = rng.choice(DIRECTION_NAMES)

    def decide(self, view):
        if view.look(self.direction) != EMPTY_CHAR:
            self.direction = view.find(EMPTY_CHAR) or DEFAULT_DIRECTION
        return Action.move(self.direction)

class Plant(Critter):
    char = PLANT_CHAR
    type_id = TYPE_PLANT

    def __init__(self, rng=None):
        super().__init__(rng)
        rng = rng if rng is not None else random
        self.energy = PLANT_BASE_ENERGY + rng.random() * PLANT_ENERGY_SPREAD

    def decide(self, view):
        if self.energy > PLANT_REPRODUCE_THRESHOLD:
            space = view.find(EMPTY_CHAR)
            if space:
                return Action.reproduce(space)
        if self.energy < PLANT_GROW_LIMIT:
            return Action.grow()
        return None

class PlantEater(Critter):
    char = PLANT_EATER_CHAR
    type_id = TYPE_PLANT_EATER

    def __init__(self, rng=None):
        super().__init__(rng)
        self.energy = PLANT_EATER_ENERGY

    def decide(self, view):
        space = view.find(EMPTY_CHAR)
        if self.energy > PLANT_EATER_REPRODUCE_THRESHOLD and space:
            return Action.reproduce(space)
        plant = view.find(PLANT_CHAR)
        if plant:
            return Action.eat(plant)
        if space:
            return Action.move(space)
        return None

def char_from_element(element):
    if element is None:
        return EMPTY_CHAR
    return element.origin_char

# --- VIEW ---

class View:
    """Read-only window on the eight cells around one position."""

    def __init__(self, world, vector, rng=None):
        self._grid = world.grid
        self.vector = vector
        self._rng = rng if rng is not None else world.rng

    def look(self, direction):
        target = self.vector.plus(DIRECTIONS[direction])
        if not self._grid.is_inside(target):
            return WALL_CHAR
        return char_from_element(self._grid.get(target))

    def find_all(self, char):
        return [d for d in DIRECTION_NAMES if self.look(d) == char]

    def find(self, char):
        found = self.find_all(char)
        if not found:
            return None
        return self._rng.choice(found)

# --- ACTION RESOLUTION ---

class ActionResolver:
    """Validates proposed actions and applies them to the world.

    Every handler returns True when the action took effect and False when
    it was not possible. Rule violations are never raised.
    """

    def __init__(self, world):
        self.world = world

    def resolve(self, critter, vector, action):
        handler = ACTION_HANDLERS.get(action.type)
        if handler is None:
            return False
        return handler(self, critter, vector, action)

    def grow(self, critter, vector, action):
        if critter.energy is None:
            return False
        critter.energy += GROW_ENERGY
        return True

    def move(self, critter, vector, action):
        grid = self.world.grid
        dest = self.world.check_destination(action, vector)
        # It costs energy to move, unless the critter has no energy to spend
        cant_move = (dest is None or
                     (critter.energy is not None and critter.energy <= MOVE_COST) or
                     grid.get(dest) is not None)
        if cant_move:
            return False
        if critter.energy is not None:
            critter.energy -= MOVE_COST
        grid.set(vector, None)
        grid.set(dest, critter)
        return True

    def eat(self, critter, vector, action):
        grid = self.world.grid
        dest = self.world.check_destination(action, vector)
        at_dest = grid.get(dest) if dest is not None else None
        if critter.energy is None or at_dest is None or at_dest.energy is None:
            return False
        critter.energy += at_dest.energy
        grid.set(dest, None)
        return True

    def reproduce(self, critter, vector, action):
        grid = self.world.grid
        if critter.origin_char not in self.world.legend:
            return False
        baby = self.world.element_from_char(critter.origin_char)
        dest = self.world.check_destination(action, vector)
        cant_reproduce = (dest is None or
                          baby.energy is None or
                          critter.energy is None or
                          critter.energy <= 2 * baby.energy or
                          grid.get(dest) is not None)
        if cant_reproduce:
            return False
        critter.energy -= 2 * baby.energy
        grid.set(dest, baby)
        return True

ACTION_HANDLERS = MappingProxyType({
    ACTION_GROW: ActionResolver.grow,
    ACTION_MOVE: ActionResolver.move,
    ACTION_EAT: ActionResolver.eat,
    ACTION_REPRODUCE: ActionResolver.reproduce,
})

# --- WORLD ---

class World:
    def __init__(self, plan, legend, rng=None):
        check_plan(plan, legend)
        self.legend = MappingProxyType(dict(legend))
        self.rng = rng if rng is not None else random
        self.grid = Grid(len(plan[0]), len(plan))
        self.resolver = ActionResolver(self)
        self.turn_count = 0

        for y, line in enumerate(plan):
            for x, ch in enumerate(line):
                self.grid.set(Vector(x, y), self.element_from_char(ch))

    def element_from_char(self, ch):
        if ch == EMPTY_CHAR:
            return None
        element = self.legend[ch](rng=self.rng)
        element.origin_char = ch
        return element

    def to_string(self, separator="\n"):
        rows = []
        for y in range(self.grid.height):
            rows.append("".join(char_from_element(self.grid.get(Vector(x, y)))
                                for x in range(self.grid.width)))
        return separator.join(rows)

    def __str__(self):
        return self.to_string()

    def critters(self):
        return [(e, v) for e, v in self.grid if isinstance(e, Critter)]

    def turn(self):
        # Offspring born this turn were not on the grid at the start of it
        present = set(e for e, _ in self.grid)
        acted = set() # Critters that already had their turn, wherever they are now
        for critter, vector in self.grid:
            if not isinstance(critter, Critter):
                continue
            if critter in acted or critter not in present:
                continue
            acted.add(critter)
            self.let_act(critter, vector)
        self.turn_count += 1

    def let_act(self, critter, vector):
        action = critter.decide(View(self, vector))
        handled = action is not None and self.resolver.resolve(critter, vector, action)
        if not handled and critter.energy is not None:
            critter.energy -= PENALTY_COST
            if critter.energy <= 0:
                self.grid.set(vector, None)
        return handled

    def check_destination(self, action, vector):
        if action.direction in DIRECTIONS:
            dest = vector.plus(DIRECTIONS[action.direction])
            if self.grid.is_inside(dest):
                return dest
        return None

def check_plan(plan, legend):
    """Fails fast on maps the legend cannot build."""
    if not plan or not plan[0]:
        raise ValueError("plan must contain at least one non-empty row")
    width = len(plan[0])
    for y, line in enumerate(plan):
        if len(line) != width:
            raise ValueError(f"row {y} has length {len(line)}, expected {width}")
    for ch in legend:
        if not isinstance(ch, str) or len(ch) != 1:
            raise ValueError(f"legend keys must be single characters, got {ch!r}")
        if ch == EMPTY_CHAR:
            raise ValueError("the space character always means an empty cell and cannot be a legend key")
    missing = sorted(set("".join(plan)) - set(legend) - {EMPTY_CHAR})
    if missing:
        raise ValueError(f"legend has no entry for {', '.join(repr(ch) for ch in missing)}")
