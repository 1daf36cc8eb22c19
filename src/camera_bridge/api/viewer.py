"""Built-in camera viewer page."""

VIEWER_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Printer Camera Viewer</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      .row { margin-bottom: 1rem; }
      input { padding: 0.4rem 0.6rem; width: 220px; }
      button { padding: 0.4rem 0.8rem; margin-right: 0.5rem; }
      img { max-width: 100%; background: #111; min-height: 240px; }
      pre { background: #f6f6f6; padding: 1rem; overflow: auto; }
    </style>
  </head>
  <body>
    <h1>Printer Camera Viewer</h1>
    <div class="row">
      <input id="ip" placeholder="Printer IP" />
      <button onclick="connectPrinter()">Connect</button>
      <button onclick="authenticate('connect')">Authenticate</button>
      <button onclick="authenticate('reauth')">Reauth</button>
    </div>
    <div class="row">
      <button onclick="startCamera()">Start camera</button>
      <button onclick="stopCamera()">Stop camera</button>
    </div>
    <img id="frame" alt="camera" />
    <pre id="output">Ready.</pre>
    <script>
      let uid = null;
      let source = null;

      async function call(path, body) {
        const output = document.getElementById('output');
        const res = await fetch(path, {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify(body)
        });
        const data = await res.json();
        output.textContent = JSON.stringify(data, null, 2);
        if (!res.ok) throw new Error(data.error);
        return data;
      }

      async function connectPrinter() {
        const ip = document.getElementById('ip').value;
        const data = await call('/api/connectByIp', { ip });
        uid = data.uid;
      }

      async function authenticate(mode) {
        await call('/api/authenticate', { uid, mode });
      }

      async function startCamera() {
        if (source) source.close();
        source = new EventSource('/api/camera/stream/' + encodeURIComponent(uid));
        source.addEventListener('frame', evt => {
          const payload = JSON.parse(evt.data);
          document.getElementById('frame').src = payload.frame;
        });
        await call('/api/startCamera', { uid, encoding: 'base64' });
      }

      async function stopCamera() {
        await call('/api/stopCamera', { uid });
        if (source) source.close();
        source = null;
      }
    </script>
  </body>
</html>
"""
