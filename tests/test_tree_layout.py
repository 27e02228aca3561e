from __future__ import annotations

import math
import unittest

from chartkit.errors import ChartDataError
from chartkit.geometry import Rect
from chartkit.series import TreeSeries
from chartkit.series.tree import build_arena, edge_commands, orthogonal_layout, radial_layout, subtree_widths
from chartkit.surface import VectorSurface


ROOT = {
    "name": "root",
    "children": [
        {"name": "a", "children": [{"name": "a1", "value": 3}, {"name": "a2"}]},
        {"name": "b"},
    ],
}


def _by_name(nodes: list) -> dict:
    return {node.name: node for node in nodes}


class ArenaTests(unittest.TestCase):
    def test_pre_order_with_parent_links(self) -> None:
        arena = build_arena(ROOT)
        self.assertEqual([n.name for n in arena], ["root", "a", "a1", "a2", "b"])
        self.assertEqual(arena[0].children, [1, 4])
        self.assertEqual(arena[2].parent, 1)
        self.assertEqual(arena[2].value, 3.0)
        self.assertEqual([n.depth for n in arena], [0, 1, 2, 2, 1])

    def test_initial_depth_collapses_subtrees(self) -> None:
        arena = build_arena(ROOT, initial_depth=1)
        self.assertEqual([n.name for n in arena], ["root", "a", "b"])
        self.assertTrue(arena[1].collapsed and arena[1].has_children)
        self.assertTrue(arena[1].is_leaf)
        self.assertFalse(arena[2].has_children)

    def test_collapsed_flag_in_data(self) -> None:
        root = {"name": "r", "children": [{"name": "x", "collapsed": True, "children": [{"name": "hidden"}]}]}
        self.assertEqual([n.name for n in build_arena(root)], ["r", "x"])

    def test_invalid_structure_raises(self) -> None:
        with self.assertRaises(ChartDataError):
            build_arena(["root"])  # type: ignore[arg-type]
        with self.assertRaises(ChartDataError):
            build_arena({"name": "r", "children": "abc"})
        with self.assertRaises(ChartDataError):
            build_arena({"name": "r", "children": ["abc"]})

    def test_subtree_widths(self) -> None:
        arena = build_arena(ROOT)
        subtree_widths(arena)
        self.assertEqual([n.width for n in arena], [4.0, 2.5, 1.0, 1.0, 1.0])


class OrthogonalLayoutTests(unittest.TestCase):
    def test_left_to_right(self) -> None:
        arena = build_arena(ROOT)
        orthogonal_layout(arena, Rect(0.0, 0.0, 500.0, 400.0), "LR")
        nodes = _by_name(arena)
        self.assertEqual(nodes["a1"].x, nodes["a2"].x)
        self.assertEqual(nodes["a"].x, nodes["b"].x)
        self.assertLess(nodes["root"].x, nodes["a"].x)
        self.assertLess(nodes["a"].x, nodes["a1"].x)
        self.assertEqual([nodes[k].y for k in ("a1", "a2", "b")], [87.5, 200.0, 312.5])
        self.assertEqual(nodes["root"].y, 200.0)
        self.assertEqual(nodes["a"].y, (nodes["a1"].y + nodes["a2"].y) / 2.0)

    def test_right_to_left_mirrors_levels(self) -> None:
        arena = build_arena(ROOT)
        orthogonal_layout(arena, Rect(0.0, 0.0, 500.0, 400.0), "RL")
        nodes = _by_name(arena)
        self.assertGreater(nodes["root"].x, nodes["a"].x)
        self.assertGreater(nodes["a"].x, nodes["a1"].x)

    def test_top_to_bottom(self) -> None:
        arena = build_arena(ROOT)
        orthogonal_layout(arena, Rect(0.0, 0.0, 500.0, 400.0), "TB")
        nodes = _by_name(arena)
        self.assertEqual((nodes["root"].x, nodes["root"].y), (250.0, 100.0))
        self.assertEqual(nodes["a1"].y, nodes["a2"].y)
        self.assertLess(nodes["a1"].x, nodes["b"].x)


class RadialLayoutTests(unittest.TestCase):
    def test_rings_by_depth(self) -> None:
        arena = build_arena(ROOT)
        radial_layout(arena, Rect(0.0, 0.0, 200.0, 200.0))
        nodes = _by_name(arena)
        self.assertEqual((nodes["root"].x, nodes["root"].y), (100.0, 100.0))
        self.assertAlmostEqual(nodes["a"].x, 100.0)
        self.assertAlmostEqual(nodes["a"].y, 60.0)
        self.assertAlmostEqual(nodes["b"].y, 140.0)
        for name in ("a1", "a2"):
            self.assertAlmostEqual(math.hypot(nodes[name].x - 100.0, nodes[name].y - 100.0), 80.0)


class TreeSeriesTests(unittest.TestCase):
    def test_edge_shapes(self) -> None:
        arena = build_arena(ROOT)
        orthogonal_layout(arena, Rect(0.0, 0.0, 500.0, 400.0), "LR")
        curve = edge_commands(arena[0], arena[1], "curve", True)
        self.assertEqual([c[0] for c in curve], ["M", "C"])
        polyline = edge_commands(arena[0], arena[1], "polyline", False)
        self.assertEqual([c[0] for c in polyline], ["M", "L", "L", "L"])

    def test_render_publishes_every_visible_node(self) -> None:
        series = TreeSeries({"data": (ROOT,)})
        surface = VectorSurface(500, 400)
        series.render(surface)
        positions = series.get_data_positions()
        self.assertEqual([p.name for p in positions], ["root", "a", "a1", "a2", "b"])
        self.assertEqual(positions[0].radius, 5.0)
        self.assertEqual(len(surface.find("path")), 4)

    def test_extra_roots_warn(self) -> None:
        series = TreeSeries({"data": (ROOT, {"name": "other"})})
        with self.assertLogs("chartkit.series.tree", level="WARNING"):
            nodes = series.compute_layout(Rect(0.0, 0.0, 300.0, 300.0))
        self.assertEqual(nodes[0].name, "root")

    def test_invalid_orient_rejected(self) -> None:
        with self.assertRaises(ValueError):
            TreeSeries({"orient": "XY"})


if __name__ == "__main__":
    unittest.main()
