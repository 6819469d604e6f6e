"""
CubeStack Frontends
Renderers for different display modes.

DUCK TYPING EXAMPLE:
Both renderers have the same interface:
- prepare_scene(size, units)
- render_pose(unit_id, position, orientation, scale)
- render_frame(units, **hud)
- handle_input() -> dict
- tick() -> dt
- cleanup()

No shared base class needed! Just swap them:

    # Window with isometric cubes and sound
    renderer = PygameRenderer(1024, 768)

    # Or nothing on screen at all (tests, --headless)
    renderer = HeadlessRenderer()
"""

# Note: Don't import renderers here to avoid importing pygame
# when it might not be needed. Import directly in main.py instead.
