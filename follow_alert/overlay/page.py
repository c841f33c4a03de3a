"""
OBS 브라우저 소스용 팔로워 알림 페이지 (GET /follower).

브라우저 안에서 display.py / client.py 와 같은 순서로 동작:
첫 조회 seed → 이후 새 identity만 대기열 → 한 번에 하나, 5초 표시 + 0.5초 쿨다운.
URL에 ?obs=true 를 붙이면 버튼 숨김.
"""

NOTIFIER_HTML = """<!DOCTYPE html>
<html lang="ko">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Follow Alert</title>
  <link href="https://fonts.googleapis.com/css2?family=Gowun+Dodum&display=swap" rel="stylesheet">
  <style>
    * { margin: 0; padding: 0; box-sizing: border-box; }
    :root { --text-color: #ffffff; }
    body {
      font-family: "Gowun Dodum", sans-serif;
      background-color: transparent;
      height: 100vh;
      width: 100vw;
      overflow: hidden;
      display: flex;
      align-items: center;
      justify-content: center;
      color: var(--text-color);
    }
    body.obs-mode .btn-area { display: none !important; }

    .alert {
      display: flex;
      align-items: center;
      gap: 16px;
      padding: 18px 26px;
      border-radius: 18px;
      background: rgba(20, 20, 24, 0.85);
      border-left: 6px solid #00ffa3;
      box-shadow: 0 6px 16px rgba(0,0,0,0.35);
      opacity: 0;
      transition: opacity 0.4s ease, transform 0.4s ease;
    }
    .alert.visible { opacity: 1; transform: none; }
    .alert.anim-slide-up { transform: translateY(40px); }
    .alert.anim-slide-down { transform: translateY(-40px); }
    .alert.anim-bounce.visible { animation: bounce 0.6s; }
    @keyframes bounce { 0% { transform: scale(0.6); } 60% { transform: scale(1.08); } 100% { transform: scale(1); } }

    .alert img { width: 64px; height: 64px; border-radius: 50%; object-fit: cover; }
    .alert .name { font-size: 1.6em; font-weight: bold; color: #00ffa3; }
    .alert .text { font-size: 1.1em; }

    .btn-area { position: fixed; top: 15px; right: 15px; display: flex; gap: 8px; }
    .btn-common {
      padding: 8px 14px; font-size: 13px; border-radius: 8px;
      border: 1px solid rgba(255,255,255,0.3); background: rgba(0,0,0,0.7);
      color: #e2e8f0; cursor: pointer; font-family: "Gowun Dodum", sans-serif;
    }
    .btn-common:hover { background: rgba(255,255,255,0.2); color: white; }
  </style>
</head>
<body>
  <div class="btn-area">
    <button type="button" class="btn-common" id="btn-test">테스트 알림</button>
  </div>

  <div class="alert" id="alert">
    <img id="alert-img" alt="" style="display:none">
    <div>
      <div class="name" id="alert-name"></div>
      <div class="text">님이 팔로우했습니다!</div>
    </div>
  </div>
  <audio id="notificationSound" preload="auto"></audio>

  <script>
    if (new URLSearchParams(window.location.search).get("obs") === "true") {
      document.body.classList.add("obs-mode");
    }

    var DWELL_MS = 5000;
    var COOLDOWN_MS = 500;

    var settings = {
      volume: 0.5, pollingInterval: 5, enableTTS: false, customSoundPath: null,
      animationType: "fade", textColor: "#ffffff", textSize: 100
    };
    var seen = new Set();
    var seeded = false;
    var queue = [];
    var displayState = "idle";  // idle -> showing -> cooldown -> idle

    function loadSettings() {
      return fetch("/settings")
        .then(function(r) { return r.ok ? r.json() : {}; })
        .then(function(s) { Object.assign(settings, s || {}); applyStyles(); })
        .catch(function(err) { console.error("[settings] ERR:", err); });
    }

    function applyStyles() {
      document.documentElement.style.setProperty("--text-color", settings.textColor);
      document.body.style.fontSize = settings.textSize + "%";
      var audio = document.getElementById("notificationSound");
      audio.src = settings.customSoundPath ? "file://" + settings.customSoundPath : "/public/sound.mp3";
      document.getElementById("alert").className = "alert anim-" + settings.animationType;
    }

    function fetchFollowers() {
      return fetch("/followers?_t=" + Date.now())
        .then(function(r) { return r.ok ? r.json() : null; })
        .then(function(res) {
          if (!res || !res.content) return;
          var followers = res.content.data || [];
          if (!seeded) {
            followers.forEach(function(f) { seen.add(f.user.userIdHash); });
            seeded = true;
            return;
          }
          followers.forEach(function(f) {
            if (!seen.has(f.user.userIdHash)) {
              seen.add(f.user.userIdHash);
              queue.push(f);
            }
          });
          advance();
        })
        .catch(function(err) { console.error("[fetch] ERR:", err); });
    }

    function advance() {
      if (displayState !== "idle" || queue.length === 0) return;
      var item = queue.shift();
      displayState = "showing";
      show(item);
      setTimeout(function() {
        displayState = "cooldown";
        hide();
        setTimeout(function() {
          displayState = "idle";
          advance();
        }, COOLDOWN_MS);
      }, DWELL_MS);
    }

    function show(item) {
      var img = document.getElementById("alert-img");
      if (item.user.profileImageUrl) {
        img.src = item.user.profileImageUrl;
        img.style.display = "";
      } else {
        img.style.display = "none";
      }
      document.getElementById("alert-name").textContent = item.user.nickname;
      document.getElementById("alert").classList.add("visible");

      var audio = document.getElementById("notificationSound");
      audio.volume = settings.volume;
      audio.currentTime = 0;
      audio.play().catch(function(e) { console.error("[AUDIO] FAIL:", e); });

      if (settings.enableTTS && "speechSynthesis" in window) {
        var u = new SpeechSynthesisUtterance(item.user.nickname + "님이 팔로우했습니다.");
        u.lang = "ko-KR";
        u.volume = settings.volume;
        window.speechSynthesis.speak(u);
      }
    }

    function hide() {
      document.getElementById("alert").classList.remove("visible");
    }

    function pollLoop() {
      fetchFollowers().then(function() {
        setTimeout(pollLoop, settings.pollingInterval * 1000);
      });
    }

    document.getElementById("btn-test").onclick = function() {
      fetch("/test-follower", { method: "POST" }).then(fetchFollowers);
    };

    loadSettings().then(pollLoop);
  </script>
</body>
</html>
"""
