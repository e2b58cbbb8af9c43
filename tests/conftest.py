from __future__ import annotations

from typing import List

import pytest

from qbjs_chat.models.example import Example


@pytest.fixture()
def mock_samples() -> List[Example]:
    return [
        Example(
            description="Fractal Fern",
            code="Screen 12\nRandomize Timer\nColor _RGB(Rnd * 255, Rnd * 255, Rnd * 255)",
        ),
        Example(
            description="A simple drawing program in only 14 lines",
            code="Dim drawing As Integer\nDo\n    If _MouseButton(1) Then\n        PSet (_MouseX, _MouseY)\n    End If\nLoop",
        ),
        Example(
            description="Tetris",
            code="Dim Shared As Double piece(6, 3, 1)\nDim Shared piece_color(6)\nScreen _NewImage(640, 480, 32)",
        ),
        Example(
            description="For when you think Tetris is too easy",
            code="Dim Shared piece(17, 2, 4)\nScreen _NewImage(640, 480, 32)\n'Complex Tetris variant",
        ),
        Example(
            description="Rotating Lorenz Attractor",
            code="Screen _NewImage(640, 480, 32)\nDim As Double p, s, b, h, x, y, z\np = 28\ns = 10\nb = 8 / 3",
        ),
        Example(
            description="Bubble Universe",
            code="Const xmax = 512, ymax = 512\nScreen _NewImage(xmax, ymax, 32)\nTAU = 6.283185307179586",
        ),
    ]
