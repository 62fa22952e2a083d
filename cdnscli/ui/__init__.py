"""Terminal UI state: main model, editor popup and text layout."""

from cdnscli.ui.model import Model, Styles
from cdnscli.ui.popup import Popup

__all__ = ["Model", "Popup", "Styles"]
