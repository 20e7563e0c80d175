"""Browser side of live reload.

The script is injected into the entry document in development mode. It
reloads the page on every ``reload`` message. When the dev server goes
away it retries every two seconds and reloads once a new connection
opens, so a restarted server brings every tab up to date.
"""

from __future__ import annotations

RELOAD_ENDPOINT = "/__pawprint/reload"

RELOAD_SCRIPT = """\
<script data-pawprint-reload>
(function() {
  var url = '/__pawprint/reload';
  function connect(reloadOnOpen) {
    var src = new EventSource(url);
    src.onopen = function() {
      if (reloadOnOpen) location.reload();
    };
    src.onmessage = function(e) {
      if (e.data === 'reload') location.reload();
    };
    src.onerror = function() {
      src.close();
      setTimeout(function() { connect(true); }, 2000);
    };
  }
  connect(false);
})();
</script>
"""


def inject_reload_script(html: str) -> str:
    """Insert the reload client before ``</head>``.

    Falls back to ``</body>``, then to appending, for documents without a
    head. Only the first closing tag is touched.
    """
    for tag in ("</head>", "</body>"):
        if tag in html:
            return html.replace(tag, RELOAD_SCRIPT + tag, 1)
    return html + RELOAD_SCRIPT
