import enum


class DoorType(str, enum.Enum):
    """Door configuration.

    A single door has one leaf, a double door has a left and a right leaf.
    """
    SINGLE = "single"
    DOUBLE = "double"


class InstallationType(str, enum.Enum):
    """Side of the building envelope the doorset sits on."""
    INTERIOR = "interior"
    EXTERIOR = "exterior"


class VisionPanelMaterial(str, enum.Enum):
    """Glazing used in a vision panel."""
    CLEAR = "clear"
    MESH = "mesh"


class InspectionItemName(str, enum.Enum):
    """The ten inspection checklist items, keyed by their record name."""
    DOOR_LEAF = "doorLeaf"
    DOOR_FRAME = "doorFrame"
    VISION_PANEL = "visionPanel"
    INTUMESCENT_SEAL = "intumescentSeal"
    SMOKE_SEAL = "smokeSeal"
    HINGES = "hinges"
    DOOR_CLOSER = "doorCloser"
    HARDWARE = "hardware"
    FIRE_TAG = "fireTag"
    DOOR_SIGNAGE = "doorSignage"


class ComponentName(str, enum.Enum):
    """Hardware components recorded in the components section."""
    DOOR_CLOSER = "doorCloser"
    HINGES = "hinges"
    HARDWARE = "hardware"


# Observed defect tags per inspection item. An empty status list is "OK".
SEAL_DEFECTS = ('Loose', 'Incomplete', 'Missing', 'With Tears')

DEFECT_VOCABULARY = {
    InspectionItemName.DOOR_LEAF: ('Chipped', 'Cracked', 'With Voids', 'Altered', 'Binding'),
    InspectionItemName.DOOR_FRAME: ('Chipped', 'Cracked', 'With Voids', 'Altered'),
    InspectionItemName.VISION_PANEL: ('Cracked', 'Scratched'),
    InspectionItemName.INTUMESCENT_SEAL: SEAL_DEFECTS,
    InspectionItemName.SMOKE_SEAL: SEAL_DEFECTS,
    InspectionItemName.HINGES: ('Loose Screw', 'Missing Screw', 'Squeaky', 'Misaligned', 'Rusty/Tarnished'),
    InspectionItemName.DOOR_CLOSER: ('Delayed/Not Closing', 'Rapid Closing', 'Unusual Noise'),
    InspectionItemName.HARDWARE: ('Sticky Locks', 'Loose Locks', 'Misaligned', 'Needs Lubrication'),
    InspectionItemName.FIRE_TAG: ('Missing', 'Unreadable', 'Painted'),
    InspectionItemName.DOOR_SIGNAGE: ('Missing', 'Peeled-off/Unreadable'),
}

# Display names used in failure explanations and the detail view
INSPECTION_ITEM_LABELS = {
    InspectionItemName.DOOR_LEAF: 'Door Leaf',
    InspectionItemName.DOOR_FRAME: 'Door Frame',
    InspectionItemName.VISION_PANEL: 'Vision Panel',
    InspectionItemName.INTUMESCENT_SEAL: 'Intumescent Seal',
    InspectionItemName.SMOKE_SEAL: 'Smoke Seal',
    InspectionItemName.HINGES: 'Hinges',
    InspectionItemName.DOOR_CLOSER: 'Door Closer',
    InspectionItemName.HARDWARE: 'Hardware',
    InspectionItemName.FIRE_TAG: 'Fire Tag',
    InspectionItemName.DOOR_SIGNAGE: 'Door Signage',
}

# Items whose defects fail the survey. Vision panel defects are recorded only.
CRITICAL_INSPECTION_ITEMS = (
    InspectionItemName.DOOR_LEAF,
    InspectionItemName.DOOR_FRAME,
    InspectionItemName.INTUMESCENT_SEAL,
    InspectionItemName.SMOKE_SEAL,
    InspectionItemName.HINGES,
    InspectionItemName.DOOR_CLOSER,
    InspectionItemName.HARDWARE,
    InspectionItemName.FIRE_TAG,
    InspectionItemName.DOOR_SIGNAGE,
)

# Component status tags share the vocabulary of the matching checklist item
COMPONENT_DEFECT_VOCABULARY = {
    ComponentName.DOOR_CLOSER: DEFECT_VOCABULARY[InspectionItemName.DOOR_CLOSER],
    ComponentName.HINGES: DEFECT_VOCABULARY[InspectionItemName.HINGES],
    ComponentName.HARDWARE: DEFECT_VOCABULARY[InspectionItemName.HARDWARE],
}

# Building context select options. The form shows an empty placeholder first.
SECURITY_FEATURES = ('Access Control', 'Card Reader', 'Magnetic Lock', 'Panic Bar', 'Keypad', 'Other')
WALL_SUBSTRATES = ('Concrete', 'Concrete Block', 'Timber Frame', 'Steel Frame', 'Plasterboard', 'Other')
WALL_FINISHES = ('Paint', 'Wallpaper', 'Tiles', 'Timber Panelling', 'Other')
FLOOR_SURFACES = ('Concrete', 'Timber', 'Tiles', 'Vinyl', 'Carpet', 'Other')
FLOOR_FINISHES = ('Carpet', 'Vinyl', 'Tiles', 'Polished', 'Sealed', 'Other')
DOOR_LEAF_MATERIALS = ('Timber', 'Steel', 'Aluminium', 'Composite')
DOOR_FRAME_MATERIALS = ('Timber', 'Steel', 'Aluminium')
