"""Quad-tree spreading of keypoints so that they cover an image evenly."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field

from .keypoint import KeyPoint

Point = tuple[int, int]


@dataclass(eq=False)
class ExtractorNode:
    """A rectangular cell holding the keypoints that fall inside it.

    Corners are ``ul`` (upper left), ``ur``, ``bl`` and ``br`` as ``(x, y)``.
    ``no_more`` marks a cell that must not be split further.
    """

    ul: Point
    ur: Point
    bl: Point
    br: Point
    keys: list[KeyPoint] = field(default_factory=list)
    no_more: bool = False

    def divide(self) -> tuple[ExtractorNode, ExtractorNode, ExtractorNode, ExtractorNode]:
        """Split into four quadrants: upper left, upper right, lower left, lower right."""
        half_x = math.ceil((self.ur[0] - self.ul[0]) / 2)
        half_y = math.ceil((self.br[1] - self.ul[1]) / 2)
        mid_x = self.ul[0] + half_x
        mid_y = self.ul[1] + half_y

        n1 = ExtractorNode(self.ul, (mid_x, self.ul[1]), (self.ul[0], mid_y), (mid_x, mid_y))
        n2 = ExtractorNode(n1.ur, self.ur, n1.br, (self.ur[0], mid_y))
        n3 = ExtractorNode(n1.bl, n1.br, self.bl, (n1.br[0], self.bl[1]))
        n4 = ExtractorNode(n3.ur, n2.br, n3.br, self.br)

        for kp in self.keys:
            if kp.x < mid_x:
                (n1 if kp.y < mid_y else n3).keys.append(kp)
            elif kp.y < mid_y:
                n2.keys.append(kp)
            else:
                n4.keys.append(kp)

        for child in (n1, n2, n3, n4):
            if len(child.keys) == 1:
                child.no_more = True
        return n1, n2, n3, n4


def _best_response(keys: list[KeyPoint]) -> KeyPoint:
    best = keys[0]
    for kp in keys[1:]:
        if kp.response > best.response:
            best = kp
    return best


def distribute_oct_tree(keypoints, min_x, max_x, min_y, max_y, n) -> list[KeyPoint]:
    """Keep about ``n`` well spread keypoints from a region.

    Keypoint coordinates are relative to ``(min_x, min_y)``. The region is
    split into cells until there are at least ``n`` of them or no cell can
    be split usefully; the strongest keypoint of each cell is returned.
    """
    width = max_x - min_x
    height = max_y - min_y
    if height <= 0 or width <= 0:
        raise ValueError("region must have a positive width and height")
    n_ini = math.floor(width / height + 0.5)
    if n_ini < 1:
        raise ValueError("region is taller than it is wide enough to hold one initial cell")
    h_x = width / n_ini

    initial = []
    for i in range(n_ini):
        left = int(h_x * i)
        right = int(h_x * (i + 1))
        initial.append(ExtractorNode((left, 0), (right, 0), (left, height), (right, height)))

    for kp in keypoints:
        index = min(max(int(kp.x / h_x), 0), n_ini - 1)
        initial[index].keys.append(kp)

    nodes: deque[ExtractorNode] = deque()
    for node in initial:
        if not node.keys:
            continue
        if len(node.keys) == 1:
            node.no_more = True
        nodes.append(node)

    finished = False
    while not finished:
        prev_size = len(nodes)
        to_expand = 0
        expandable: list[tuple[int, ExtractorNode]] = []
        pushed: list[ExtractorNode] = []
        kept: list[ExtractorNode] = []

        for node in nodes:
            if node.no_more:
                kept.append(node)
                continue
            for child in node.divide():
                if child.keys:
                    pushed.append(child)
                    if len(child.keys) > 1:
                        to_expand += 1
                        expandable.append((len(child.keys), child))
        nodes = deque(reversed(pushed))
        nodes.extend(kept)

        if len(nodes) >= n or len(nodes) == prev_size:
            finished = True
        elif len(nodes) + to_expand * 3 > n:
            while not finished:
                prev_size = len(nodes)
                previous = sorted(expandable, key=lambda pair: pair[0])
                expandable = []
                for _, node in reversed(previous):
                    for child in node.divide():
                        if child.keys:
                            nodes.appendleft(child)
                            if len(child.keys) > 1:
                                expandable.append((len(child.keys), child))
                    nodes.remove(node)
                    if len(nodes) >= n:
                        break
                if len(nodes) >= n or len(nodes) == prev_size:
                    finished = True

    return [_best_response(node.keys) for node in nodes]