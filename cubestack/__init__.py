"""
CubeStack
Fills a size x size x size grid one cube at a time.

Each cube drops in beside the grid, searches a route to its slot and
rolls there cell by cell. Settled cubes become obstacles (and support)
for every cube that follows.

Features:
- Uniform-cost path search with support/gravity rules
- Height-ordered placement queue
- Rolling motion sequencer on an awaitable tween driver
- Event-driven sound cues and console logging
"""
