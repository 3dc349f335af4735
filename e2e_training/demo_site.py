"""Local demo site for offline end-to-end runs.

Mirrors the practice pages and public APIs used by the training suites:
- /login, /authenticate, /secure, /logout: form login with flash messages
- /iframe: editor body inside an iframe (#mce_0_ifr)
- /upload, /download, /download/<name>: file upload and download
- /dynamic_loading, /checkboxes, /dropdown: waits and assertions
- /network: page that calls /api/users and /api/posts (intercept target)
- /json-api/...: JSONPlaceholder-style resources with faked writes
- /auth-api/...: ReqRes-style login and user lookup

State is in memory and reset with reset_demo_state().
"""
from __future__ import annotations

import secrets
import threading
import time
from typing import Any, Dict, List, Optional

from flask import Flask, Response, flash, jsonify, redirect, render_template_string, request, session, url_for

VALID_USERNAME = "tomsmith"
VALID_PASSWORD = "SuperSecretPassword!"

REQRES_EMAIL = "eve.holt@reqres.in"
REQRES_PASSWORD = "cityslicka"
REQRES_TOKEN = "QpwL5tke4Pnpja7X4"

DOWNLOADABLE_FILES: Dict[str, str] = {
    "some-file.txt": "Demo download content.\n",
    "notes.txt": "Line one\nLine two\n",
}
UPLOADED_FILES: Dict[str, bytes] = {}

NETWORK_USERS = [
    {"id": 1, "name": "Leanne Graham"},
    {"id": 2, "name": "Ervin Howell"},
]

USERS: List[Dict[str, Any]] = [
    {
        "id": i,
        "name": name,
        "username": username,
        "email": f"{username.lower()}@example.test",
        "address": {
            "street": "Kulas Light",
            "suite": f"Apt. {550 + i}",
            "city": "Gwenborough",
            "zipcode": "92998-3874",
            "geo": {"lat": "-37.3159", "lng": "81.1496"},
        },
        "phone": "1-770-736-8031",
        "website": "hildegard.org",
        "company": {"name": "Romaguera-Crona", "catchPhrase": "Multi-layered client-server neural-net"},
    }
    for i, (name, username) in enumerate(
        [("Leanne Graham", "Bret"), ("Ervin Howell", "Antonette"), ("Clementine Bauch", "Samantha")],
        start=1,
    )
]

POSTS: List[Dict[str, Any]] = [
    {"userId": 1 + (i - 1) // 10, "id": i, "title": f"Post title {i}", "body": f"Post body {i}"}
    for i in range(1, 31)
]

COMMENTS: List[Dict[str, Any]] = [
    {
        "postId": 1 + (i - 1) // 5,
        "id": i,
        "name": f"Comment {i}",
        "email": f"commenter{i}@example.test",
        "body": f"Comment body {i}",
    }
    for i in range(1, 51)
]

TODOS: List[Dict[str, Any]] = [
    {"userId": 1, "id": i, "title": f"Todo {i}", "completed": i % 2 == 0}
    for i in range(1, 11)
]

RESOURCES = {"users": USERS, "posts": POSTS, "comments": COMMENTS, "todos": TODOS}

# Ids handed out by POST, like JSONPlaceholder (nothing is persisted)
NEXT_IDS = {"users": 11, "posts": 101, "comments": 501, "todos": 201}

CACHE_CONTROL = "max-age=43200"


def reset_demo_state() -> None:
    UPLOADED_FILES.clear()


LAYOUT = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>{{ title }}</title></head>
<body>
<div id="content" class="large-12 columns">
{% with messages = get_flashed_messages(with_categories=true) %}
  {% for category, message in messages %}
  <div id="flash" class="flash {{ category }}" data-testid="flash">{{ message }}<a href="#" class="close">x</a></div>
  {% endfor %}
{% endwith %}
{{ body|safe }}
</div>
</body>
</html>"""

INDEX_BODY = """
<h1 class="heading" data-testid="page-heading">Welcome to the-internet</h1>
<h2>Available Examples</h2>
<ul>
  <li><a href="/login">Form Authentication</a></li>
  <li><a href="/iframe">Frames</a></li>
  <li><a href="/upload">File Upload</a></li>
  <li><a href="/download">File Download</a></li>
  <li><a href="/dynamic_loading">Dynamic Loading</a></li>
  <li><a href="/checkboxes">Checkboxes</a></li>
  <li><a href="/dropdown">Dropdown</a></li>
  <li><a href="/network">Network Requests</a></li>
</ul>
"""

LOGIN_BODY = """
<div class="example">
  <h2>Login Page</h2>
  <h4 class="subheader">This is where you can log into the secure area.</h4>
  <form name="login" id="login" action="/authenticate" method="post">
    <div class="row">
      <label for="username">Username</label>
      <input type="text" name="username" id="username" autocomplete="username">
    </div>
    <div class="row">
      <label for="password">Password</label>
      <input type="password" name="password" id="password" autocomplete="current-password">
    </div>
    <div class="row">
      <label for="remember-me"><input type="checkbox" name="remember" id="remember-me"> Remember me</label>
    </div>
    <button class="radius" type="submit"><i class="fa fa-2x fa-sign-in"> Login</i></button>
    <a href="/forgot_password" id="forgot-password">Forgot password?</a>
  </form>
</div>
"""

FORGOT_PASSWORD_BODY = """
<div class="example">
  <h2>Forgot Password</h2>
  <form id="forgot_password" action="/forgot_password" method="post">
    <label for="email">E-mail</label>
    <input type="text" id="email" name="email">
    <button id="form_submit" class="radius" type="submit">Retrieve password</button>
  </form>
</div>
"""

SECURE_BODY = """
<div class="example">
  <h2><i class="icon-lock"></i> Secure Area</h2>
  <h4 class="subheader">Welcome to the Secure Area. When you are done click logout below.</h4>
  <a class="button secondary radius" href="/logout" data-testid="logout"><i class="icon-2x icon-signout"> Logout</i></a>
</div>
"""

IFRAME_DOCUMENT = (
    "<!DOCTYPE html><html><head><title>Rich Text Area</title></head>"
    '<body id="tinymce" class="mce-content-body" contenteditable="true">'
    "<p>Your content goes here.</p></body></html>"
)

IFRAME_BODY = """
<div class="example">
  <h3>An iFrame containing the TinyMCE WYSIWYG Editor</h3>
  <div class="tox-edit-area">
    <iframe id="mce_0_ifr" title="Rich Text Area" srcdoc="{{ document }}"></iframe>
  </div>
</div>
"""

UPLOAD_FORM_BODY = """
<div class="example">
  <h3>File Uploader</h3>
  <p>Choose a file on your system and then click upload.</p>
  <form method="post" enctype="multipart/form-data" action="/upload">
    <input id="file-upload" type="file" name="file">
    <br>
    <input id="file-submit" class="button" type="submit" value="Upload">
  </form>
</div>
"""

UPLOAD_DONE_BODY = """
<div class="example">
  <h3>File Uploaded!</h3>
  <div id="uploaded-files" class="panel text-center">{{ filename }}</div>
</div>
"""

DOWNLOAD_BODY = """
<div class="example">
  <h3>File Downloader</h3>
  {% for name in files %}
  <a href="/download/{{ name }}">{{ name }}</a><br>
  {% endfor %}
</div>
"""

DYNAMIC_LOADING_BODY = """
<div class="example">
  <h3>Dynamically Loaded Page Elements</h3>
  <h4>Example: Element rendered after the fact</h4>
  <div id="start"><button>Start</button></div>
  <div id="loading" style="display:none">Loading... </div>
  <div id="finish-container"></div>
</div>
<script>
  document.querySelector('#start button').addEventListener('click', function () {
    document.getElementById('start').style.display = 'none';
    var loading = document.getElementById('loading');
    loading.style.display = 'block';
    setTimeout(function () {
      loading.remove();
      var finish = document.createElement('div');
      finish.id = 'finish';
      finish.innerHTML = '<h4>Hello World!</h4>';
      document.getElementById('finish-container').appendChild(finish);
    }, {{ delay }});
  });
</script>
"""

CHECKBOXES_BODY = """
<div class="example">
  <h3>Checkboxes</h3>
  <form id="checkboxes">
    <input type="checkbox"> checkbox 1<br>
    <input type="checkbox" checked> checkbox 2
  </form>
</div>
"""

DROPDOWN_BODY = """
<div class="example">
  <h3>Dropdown List</h3>
  <select id="dropdown">
    <option value="" disabled="disabled" selected="selected">Please select an option</option>
    <option value="1">Option 1</option>
    <option value="2">Option 2</option>
  </select>
</div>
"""

NETWORK_BODY = """
<div class="example">
  <h3>Network Requests</h3>
  <button id="load-users" data-testid="load-users">Load users</button>
  <button id="create-post" data-testid="create-post">Create post</button>
  <div id="spinner" style="display:none">Loading...</div>
  <ul id="users"></ul>
  <div id="empty" style="display:none">No users found</div>
  <div id="error" style="display:none"></div>
  <div id="post-result"></div>
</div>
<script>
  function show(id, visible) { document.getElementById(id).style.display = visible ? 'block' : 'none'; }
  document.getElementById('load-users').addEventListener('click', function () {
    show('spinner', true); show('error', false); show('empty', false);
    document.getElementById('users').innerHTML = '';
    fetch('/api/users').then(function (response) {
      return response.json().then(function (data) { return {status: response.status, data: data}; });
    }).then(function (result) {
      show('spinner', false);
      if (result.status >= 400) {
        var error = document.getElementById('error');
        error.textContent = 'Error: ' + result.status;
        show('error', true);
        return;
      }
      var users = result.data.users || [];
      if (!users.length) { show('empty', true); return; }
      users.forEach(function (user) {
        var item = document.createElement('li');
        item.className = 'user';
        item.textContent = user.name;
        document.getElementById('users').appendChild(item);
      });
    }).catch(function () {
      show('spinner', false);
      var error = document.getElementById('error');
      error.textContent = 'Network error';
      show('error', true);
    });
  });
  document.getElementById('create-post').addEventListener('click', function () {
    fetch('/api/posts', {
      method: 'POST',
      headers: {'Content-Type': 'application/json'},
      body: JSON.stringify({title: 'My New Post'})
    }).then(function (response) { return response.json(); }).then(function (data) {
      document.getElementById('post-result').textContent = 'Created post ' + data.id + ': ' + data.title;
    });
  });
</script>
"""


def _page(title: str, body: str, **context: Any) -> str:
    rendered_body = render_template_string(body, **context)
    return render_template_string(LAYOUT, title=title, body=rendered_body)


def _json(payload: Any, status: int = 200) -> Response:
    response = jsonify(payload)
    response.status_code = status
    response.headers["Cache-Control"] = CACHE_CONTROL
    return response


def _find(resource: str, item_id: int) -> Optional[Dict[str, Any]]:
    return next((item for item in RESOURCES[resource] if item["id"] == item_id), None)


def create_demo_app() -> Flask:
    """Create and configure the demo site Flask app."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.secret_key = secrets.token_hex(16)

    # ---- practice pages ----------------------------------------------------
    @app.route("/")
    def index():
        return _page("The Internet", INDEX_BODY)

    @app.route("/health")
    def health():
        return _json({"status": "ok"})

    @app.route("/login")
    def login():
        return _page("The Internet", LOGIN_BODY)

    @app.route("/authenticate", methods=["POST"])
    def authenticate():
        username = request.form.get("username", "")
        password = request.form.get("password", "")
        if username != VALID_USERNAME:
            flash("Your username is invalid!", "error")
            return redirect(url_for("login"))
        if password != VALID_PASSWORD:
            flash("Your password is invalid!", "error")
            return redirect(url_for("login"))
        session["user"] = username
        flash("You logged into a secure area!", "success")
        return redirect(url_for("secure"))

    @app.route("/forgot_password", methods=["GET", "POST"])
    def forgot_password():
        if request.method == "POST":
            return _page("Internal Server Error", "<h1>Internal Server Error</h1>"), 500
        return _page("The Internet", FORGOT_PASSWORD_BODY)

    @app.route("/secure")
    def secure():
        if not session.get("user"):
            flash("You must login to view the secure area!", "error")
            return redirect(url_for("login"))
        return _page("The Internet", SECURE_BODY)

    @app.route("/logout")
    def logout():
        session.pop("user", None)
        flash("You logged out of the secure area!", "success")
        return redirect(url_for("login"))

    @app.route("/iframe")
    def iframe():
        return _page("The Internet", IFRAME_BODY, document=IFRAME_DOCUMENT)

    @app.route("/upload", methods=["GET", "POST"])
    def upload():
        if request.method == "GET":
            return _page("The Internet", UPLOAD_FORM_BODY)
        uploaded = request.files.get("file")
        if uploaded is None or not uploaded.filename:
            return _page("Internal Server Error", "<h1>Internal Server Error</h1>"), 500
        UPLOADED_FILES[uploaded.filename] = uploaded.read()
        return _page("The Internet", UPLOAD_DONE_BODY, filename=uploaded.filename)

    @app.route("/download")
    def download():
        files = list(DOWNLOADABLE_FILES) + [name for name in UPLOADED_FILES if name not in DOWNLOADABLE_FILES]
        return _page("The Internet", DOWNLOAD_BODY, files=files)

    @app.route("/download/<path:name>")
    def download_file(name: str):
        if name in UPLOADED_FILES:
            content = UPLOADED_FILES[name]
        elif name in DOWNLOADABLE_FILES:
            content = DOWNLOADABLE_FILES[name].encode("utf-8")
        else:
            return _page("Not Found", "<h1>Not Found</h1>"), 404
        return Response(
            content,
            mimetype="application/octet-stream",
            headers={"Content-Disposition": f'attachment; filename="{name}"'},
        )

    @app.route("/dynamic_loading")
    @app.route("/dynamic_loading/<int:example>")
    def dynamic_loading(example: int = 2):
        delay = request.args.get("delay", default=1000, type=int)
        return _page("The Internet", DYNAMIC_LOADING_BODY, delay=max(0, delay))

    @app.route("/checkboxes")
    def checkboxes():
        return _page("The Internet", CHECKBOXES_BODY)

    @app.route("/dropdown")
    def dropdown():
        return _page("The Internet", DROPDOWN_BODY)

    @app.route("/network")
    def network():
        return _page("Network Requests", NETWORK_BODY)

    # ---- endpoints the /network page calls ----------------------------------
    @app.route("/api/users")
    def api_users():
        return _json({"users": NETWORK_USERS})

    @app.route("/api/posts", methods=["POST"])
    def api_posts():
        payload = request.get_json(silent=True) or {}
        return _json({"id": 1, "title": payload.get("title", ""), "message": "Created"}, 201)

    # ---- JSONPlaceholder-style API ------------------------------------------
    @app.route("/json-api/<resource>", methods=["GET", "POST"])
    def json_collection(resource: str):
        if resource not in RESOURCES:
            return _json({}, 404)
        if request.method == "POST":
            payload = request.get_json(silent=True) or {}
            return _json({**payload, "id": NEXT_IDS[resource]}, 201)

        items = RESOURCES[resource]
        for key, raw in request.args.items():
            if key == "_limit":
                continue
            items = [item for item in items if str(item.get(key)) == raw]
        limit = request.args.get("_limit", type=int)
        if limit is not None:
            items = items[:limit]
        return _json(items)

    @app.route("/json-api/<resource>/<int:item_id>", methods=["GET", "PUT", "PATCH", "DELETE"])
    def json_item(resource: str, item_id: int):
        if resource not in RESOURCES:
            return _json({}, 404)
        item = _find(resource, item_id)
        if request.method == "DELETE":
            return _json({})
        if item is None:
            return _json({}, 404)
        payload = request.get_json(silent=True) or {}
        if request.method == "PUT":
            return _json({**payload, "id": item_id})
        if request.method == "PATCH":
            return _json({**item, **payload, "id": item_id})
        return _json(item)

    @app.route("/json-api/posts/<int:post_id>/comments")
    def json_post_comments(post_id: int):
        return _json([c for c in COMMENTS if c["postId"] == post_id])

    # ---- ReqRes-style auth API ----------------------------------------------
    @app.route("/auth-api/login", methods=["POST"])
    def auth_login():
        payload = request.get_json(silent=True) or {}
        if not payload.get("password"):
            return _json({"error": "Missing password"}, 400)
        if payload.get("email") != REQRES_EMAIL or payload.get("password") != REQRES_PASSWORD:
            return _json({"error": "user not found"}, 400)
        return _json({"token": REQRES_TOKEN})

    @app.route("/auth-api/users/<int:user_id>")
    def auth_user(user_id: int):
        user = _find("users", user_id)
        if user is None:
            return _json({}, 404)
        first, _, last = user["name"].partition(" ")
        return _json({
            "data": {
                "id": user_id,
                "email": user["email"],
                "first_name": first,
                "last_name": last,
                "avatar": f"https://reqres.in/img/faces/{user_id}-image.jpg",
            }
        })

    return app


class DemoSiteServer:
    """Serve the demo app from a background thread (port 0 = any free port)."""

    def __init__(self, host: str = "127.0.0.1", port: int = 0):
        self.host = host
        self.port = port
        self.app = create_demo_app()
        self.server = None
        self.thread = None

    def start(self) -> "DemoSiteServer":
        from werkzeug.serving import make_server

        self.server = make_server(self.host, self.port, self.app, threaded=True)
        self.port = self.server.server_port
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()
        time.sleep(0.1)
        return self

    def stop(self) -> None:
        if self.server:
            self.server.shutdown()
            self.server.server_close()
            if self.thread:
                self.thread.join(timeout=5)
            self.server = None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def __enter__(self) -> "DemoSiteServer":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()


def main() -> None:
    """Run the demo site in the foreground (python -m e2e_training.demo_site)."""
    import argparse

    parser = argparse.ArgumentParser(description="Serve the local practice site")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5555)
    args = parser.parse_args()
    create_demo_app().run(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
