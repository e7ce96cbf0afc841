"""
Dark mode theme injected into every UI page.

Served at {web_path}/css/custom.css and {web_path}/js/custom.js.
"""

CUSTOM_CSS = """\
body.mh-dark { background: #0f1115; color: #e6e6e6; }
body.mh-dark .navbar-default { background: #141821; border-color: #242a36; }
body.mh-dark .navbar-default .navbar-brand,
body.mh-dark .navbar-default .navbar-nav > li > a { color: #e6e6e6; }
body.mh-dark .navbar-default .navbar-nav > li > a:hover,
body.mh-dark .navbar-default .navbar-brand:hover { color: #ffffff; }
body.mh-dark .nav > li > a { color: #d7dbe6; }
body.mh-dark .nav > li > a:hover,
body.mh-dark .nav > li > a:focus { background: #1b2130; color: #ffffff; }
body.mh-dark .well { background: #161b22; border-color: #2a2f3a; color: #e6e6e6; }
body.mh-dark .messages .msglist-message { border-bottom: 1px solid #2a2f3a; }
body.mh-dark .messages .msglist-message:hover { background: #1b2130; }
body.mh-dark .subject.unread { color: #e6e6e6; }
body.mh-dark .toolbar { background: #0f1115; border-color: #2a2f3a; }
body.mh-dark .btn-default { background: #1b2130; border-color: #2a2f3a; color: #e6e6e6; }
body.mh-dark .btn-default:hover,
body.mh-dark .btn-default:focus { background: #242b3d; color: #ffffff; }
body.mh-dark input.form-control,
body.mh-dark select.form-control { background: #0f1115; color: #e6e6e6; border-color: #2a2f3a; }
body.mh-dark .list-group-item { background: #141821; border-color: #2a2f3a; color: #e6e6e6; }
body.mh-dark .list-group-item:hover { background: #1b2130; }
body.mh-dark .table > thead > tr > th,
body.mh-dark .table > tbody > tr > td { border-color: #2a2f3a; }
body.mh-dark .nav-tabs > li > a { color: #d7dbe6; }
body.mh-dark .nav-tabs > li.active > a,
body.mh-dark .nav-tabs > li.active > a:hover,
body.mh-dark .nav-tabs > li.active > a:focus { background: #141821; border-color: #2a2f3a; color: #ffffff; }
body.mh-dark .tab-content { background: #0f1115; }
.mh-theme-fab { position: fixed; right: 16px; bottom: 16px; z-index: 9999; padding: 6px 10px; border-radius: 4px; border: 1px solid #2a2f3a; background: #1b2130; color: #e6e6e6; font-size: 12px; }
body.mh-light .mh-theme-fab { background: #f7f7f7; color: #333333; border-color: #cccccc; }
body.mh-dark .mh-theme-toggle { cursor: pointer; }
"""

CUSTOM_JS = """\
(function(){
  function ready(fn){
    if(document.readyState !== 'loading'){ fn(); } else { document.addEventListener('DOMContentLoaded', fn); }
  }

  function setTheme(theme){
    var body = document.body;
    if(!body){ return; }
    body.classList.toggle('mh-dark', theme === 'dark');
    body.classList.toggle('mh-light', theme === 'light');
  }

  function getStoredTheme(){
    try { return localStorage.getItem('mhTheme'); } catch(e) { return null; }
  }

  function storeTheme(theme){
    try { localStorage.setItem('mhTheme', theme); } catch(e) {}
  }

  function resolveTheme(){
    var stored = getStoredTheme();
    if(stored){ return stored; }
    if(window.matchMedia && window.matchMedia('(prefers-color-scheme: dark)').matches){
      return 'dark';
    }
    return 'light';
  }

  function addToggle(){
    var nav = document.querySelector('.navbar-nav.navbar-right');
    var a = document.createElement('a');
    a.href = '#';
    a.className = 'mh-theme-toggle';

    function updateLabel(){
      a.textContent = document.body.classList.contains('mh-dark') ? 'Light mode' : 'Dark mode';
    }

    a.addEventListener('click', function(ev){
      ev.preventDefault();
      var next = document.body.classList.contains('mh-dark') ? 'light' : 'dark';
      setTheme(next);
      storeTheme(next);
      updateLabel();
    });
    if(nav){
      var li = document.createElement('li');
      li.appendChild(a);
      nav.insertBefore(li, nav.firstChild);
    } else {
      a.className = 'mh-theme-fab';
      document.body.appendChild(a);
    }
    updateLabel();
  }

  ready(function(){
    setTheme(resolveTheme());
    addToggle();
  });

  if(window.matchMedia){
    var media = window.matchMedia('(prefers-color-scheme: dark)');
    if(media && typeof media.addEventListener === 'function'){
      media.addEventListener('change', function(e){
        if(getStoredTheme()){ return; }
        setTheme(e.matches ? 'dark' : 'light');
      });
    }
  }
})();
"""
