"""Browser confirmation when leaving the page with an unfinished wizard."""

from __future__ import annotations

import streamlit.components.v1 as components

_HANDLER_NAME = "__directoryWizardUnloadGuard"


def unload_guard_script(active: bool) -> str:
    """Return the script that installs or removes the ``beforeunload`` handler.

    The component iframe is re-rendered on every run, so the handler is kept on
    the parent window and swapped rather than stacked.
    """

    install = "true" if active else "false"
    return f"""
<script>
  (function() {{
    try {{
      const parentWin = window.parent;
      const previous = parentWin['{_HANDLER_NAME}'];
      if (previous) {{
        parentWin.removeEventListener('beforeunload', previous);
        parentWin['{_HANDLER_NAME}'] = null;
      }}
      if ({install}) {{
        const handler = function(event) {{
          event.preventDefault();
          event.returnValue = '';
          return '';
        }};
        parentWin.addEventListener('beforeunload', handler);
        parentWin['{_HANDLER_NAME}'] = handler;
      }}
    }} catch (e) {{}}
  }})();
</script>
"""


def render_unload_guard(active: bool) -> None:
    """Install the guard while ``active`` and remove it otherwise."""

    components.html(unload_guard_script(active), height=0, width=0, scrolling=False)


__all__ = ["render_unload_guard", "unload_guard_script"]
