INDEX_HTML = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Spontaneous Adventures</title>
  <link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.2/dist/css/bootstrap.min.css" rel="stylesheet">
  <style>
    body{background:linear-gradient(135deg,#f5f3ff,#eff6ff);min-height:100vh;}
    .activity-card{border:2px solid #bfdbfe;}
    .activity-card h2{color:#1d4ed8;}
    #generate{border-radius:999px;padding:0.75rem 2rem;font-size:1.25rem;}
  </style>
</head>
<body class="p-4">
  <main class="container" style="max-width:40rem">
    <header class="text-center mb-4">
      <h1 class="fw-bold">Spontaneous Adventures</h1>
      <p class="text-muted fs-5">Improvisational challenges to break your routine.</p>
    </header>

    <div class="d-flex flex-wrap justify-content-center align-items-center gap-3 mb-4">
      <div class="btn-group" role="group" aria-label="Game mode">
        <button id="mode-solo" class="btn btn-dark" data-mode="solo">Solo</button>
        <button id="mode-multiplayer" class="btn btn-outline-dark" data-mode="multiplayer">Multiplayer</button>
      </div>
      <div id="players" class="d-none align-items-center gap-2 bg-white border rounded p-2">
        <button id="players-dec" class="btn btn-outline-secondary btn-sm rounded-circle" aria-label="Decrease">-</button>
        <span id="player-count" class="fw-semibold text-center" style="width:2rem">2</span>
        <button id="players-inc" class="btn btn-outline-secondary btn-sm rounded-circle" aria-label="Increase">+</button>
        <span class="text-muted small">players</span>
      </div>
    </div>

    <div id="card" class="card activity-card mb-4 d-none">
      <div class="card-body">
        <h2 id="activity-title" class="card-title text-center h3"></h2>
        <p id="activity-description" class="card-text"></p>
        <p class="text-muted fst-italic small text-center">You've got to jump off the cliff all the time and build your wings on the way down. - Ray Bradbury</p>
        <div class="text-center"><button id="share" class="btn btn-outline-secondary btn-sm">Copy to challenge a friend</button></div>
      </div>
    </div>

    <div class="text-center"><button id="generate" class="btn btn-primary shadow">I'm Feeling Lucky</button></div>
    <div id="notices" class="mt-4" aria-live="polite"></div>
  </main>
  <script>
    'use strict';
    const $ = id => document.getElementById(id);

    async function api(path, body) {
      const opts = {method: 'POST', headers: {'Content-Type': 'application/json'}};
      if (body !== undefined) opts.body = JSON.stringify(body);
      const r = await fetch(path, opts);
      if (!r.ok) throw new Error('request failed: ' + r.status);
      return r.json();
    }

    function showNotices(notices) {
      const box = $('notices');
      (notices || []).forEach(n => {
        const el = document.createElement('div');
        el.className = 'alert ' + (n.variant === 'destructive' ? 'alert-danger' : 'alert-info');
        el.innerHTML = '<strong></strong><div></div>';
        el.querySelector('strong').textContent = n.title;
        el.querySelector('div').textContent = n.description;
        box.appendChild(el);
        setTimeout(() => el.remove(), 4000);
      });
    }

    function render(state) {
      const multi = state.mode === 'multiplayer';
      $('mode-solo').className = 'btn ' + (multi ? 'btn-outline-dark' : 'btn-dark');
      $('mode-multiplayer').className = 'btn ' + (multi ? 'btn-dark' : 'btn-outline-dark');
      $('players').classList.toggle('d-none', !multi);
      $('players').classList.toggle('d-flex', multi);
      $('player-count').textContent = state.player_count;
      $('players-dec').disabled = state.player_count <= 2;
      $('players-inc').disabled = state.player_count >= 10;
      if (state.activity) {
        $('card').classList.remove('d-none');
        $('activity-title').textContent = state.activity.title;
        $('activity-description').textContent = state.activity.description;
      }
      $('share').textContent = state.copied ? 'Copied!' : 'Copy to challenge a friend';
    }

    document.querySelectorAll('[data-mode]').forEach(b => b.addEventListener('click', async () => {
      render(await api('/api/mode', {mode: b.dataset.mode}));
    }));
    $('players-inc').addEventListener('click', async () => render(await api('/api/players/increment')));
    $('players-dec').addEventListener('click', async () => render(await api('/api/players/decrement')));

    $('generate').addEventListener('click', async () => {
      const btn = $('generate');
      btn.disabled = true;
      btn.textContent = 'Generating...';
      try {
        const res = await api('/api/activity');
        render(res.state);
        showNotices(res.notices);
      } catch (e) {
        console.error(e);
        showNotices([{title: 'Something went wrong', description: 'Please try again.', variant: 'destructive'}]);
      } finally {
        btn.disabled = false;
        btn.textContent = "I'm Feeling Lucky";
      }
    });

    $('share').addEventListener('click', async () => {
      try {
        const res = await api('/api/share');
        if (res.ok) await navigator.clipboard.writeText(res.share_text);
        render(res.state);
        showNotices(res.notices);
        if (res.ok) setTimeout(async () => {
          const r = await fetch('/api/state');
          if (r.ok) render(await r.json());
        }, 2100);
      } catch (e) {
        console.error(e);
        showNotices([{title: "Couldn't copy to clipboard", description: 'Try selecting and copying the text manually.', variant: 'destructive'}]);
      }
    });

    fetch('/api/state').then(r => r.json()).then(render).catch(console.error);
  </script>
</body>
</html>
"""
