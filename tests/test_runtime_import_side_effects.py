import importlib
import sys
from unittest.mock import patch

import pytest


def _fresh_import(module_name: str):
    sys.modules.pop(module_name, None)
    return importlib.import_module(module_name)


@pytest.mark.parametrize(
    "module_name",
    [
        "src.core.config",
        "src.editor.dialogs",
        "src.editor.editor_renderer",
        "src.editor.level_editor",
    ],
)
def test_import_has_no_runtime_side_effects(module_name):
    with patch("pygame.init") as mock_pygame_init, patch(
        "pygame.display.set_mode"
    ) as mock_set_mode, patch("pygame.display.set_caption") as mock_set_caption, patch(
        "os.makedirs"
    ) as mock_makedirs:
        _fresh_import(module_name)

    mock_pygame_init.assert_not_called()
    mock_set_mode.assert_not_called()
    mock_set_caption.assert_not_called()
    mock_makedirs.assert_not_called()

