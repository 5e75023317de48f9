"""Dashboard — single-page catalog UI served by the daemon."""

from __future__ import annotations
from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["dashboard"])

DASHBOARD_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Lineage Desk</title>
<style>
:root {
    --bg: #0d1117;
    --surface: #161b22;
    --border: #30363d;
    --text: #c9d1d9;
    --text-dim: #8b949e;
    --green: #3fb950;
    --red: #f85149;
    --amber: #d29922;
    --blue: #58a6ff;
    --font: 'SF Mono', 'Cascadia Code', 'JetBrains Mono', monospace;
}
* { margin:0; padding:0; box-sizing:border-box; }
body { background:var(--bg); color:var(--text); font-family:var(--font); font-size:13px; }
.container { max-width:1100px; margin:0 auto; padding:24px; }
header { display:flex; justify-content:space-between; align-items:center; margin-bottom:24px; padding-bottom:16px; border-bottom:1px solid var(--border); }
header h1 { font-size:18px; color:var(--green); font-weight:600; }
header .status { color:var(--text-dim); font-size:12px; }
.tabs { display:flex; gap:4px; margin-bottom:16px; }
.tab-btn { background:transparent; border:1px solid var(--border); color:var(--text-dim); padding:8px 14px; border-radius:6px; cursor:pointer; font-family:var(--font); font-size:12px; }
.tab-btn.active, .tab-btn:hover { border-color:var(--green); color:var(--green); }
.tab-content { display:none; background:var(--surface); border:1px solid var(--border); border-radius:8px; padding:16px; }
.tab-content.active { display:block; }
.row { display:grid; grid-template-columns:repeat(auto-fit, minmax(220px, 1fr)); gap:12px; margin-bottom:12px; }
label { display:block; color:var(--text-dim); font-size:11px; text-transform:uppercase; letter-spacing:0.5px; margin-bottom:4px; }
input, select { width:100%; background:var(--bg); border:1px solid var(--border); color:var(--text); padding:7px 9px; border-radius:6px; font-family:var(--font); font-size:12px; }
input[readonly] { color:var(--text-dim); }
.field { position:relative; }
.submit-btn { background:rgba(63,185,80,0.15); border:1px solid var(--green); color:var(--green); padding:8px 16px; border-radius:6px; cursor:pointer; font-family:var(--font); font-size:12px; }
.submit-btn.danger { background:rgba(248,81,73,0.15); border-color:var(--red); color:var(--red); }
.autocomplete-suggestions { display:none; position:absolute; z-index:10; left:0; right:0; background:var(--surface); border:1px solid var(--border); border-radius:6px; max-height:220px; overflow-y:auto; }
.autocomplete-suggestions.show { display:block; }
.autocomplete-item { padding:6px 10px; cursor:pointer; }
.autocomplete-item:hover { background:rgba(88,166,255,0.1); color:var(--blue); }
table { width:100%; border-collapse:collapse; margin-top:16px; }
th { text-align:left; padding:8px 12px; color:var(--text-dim); font-size:11px; text-transform:uppercase; letter-spacing:0.5px; border-bottom:1px solid var(--border); }
td { padding:8px 12px; border-bottom:1px solid var(--border); }
.empty { padding:24px; text-align:center; color:var(--text-dim); }
.toast { position:fixed; bottom:24px; right:24px; padding:10px 16px; border-radius:6px; display:none; border:1px solid var(--border); background:var(--surface); }
.toast.show { display:block; }
.toast.toast-success { border-color:var(--green); color:var(--green); }
.toast.toast-error { border-color:var(--red); color:var(--red); }
.modal { display:none; position:fixed; inset:0; background:rgba(0,0,0,0.6); }
.modal-body { max-width:440px; margin:15vh auto; background:var(--surface); border:1px solid var(--border); border-radius:8px; padding:20px; }
.modal-body h3 { font-size:14px; margin-bottom:12px; }
.modal-body p { color:var(--text-dim); line-height:1.7; margin-bottom:16px; }
.modal-actions { display:flex; gap:8px; justify-content:flex-end; }
</style>
</head>
<body>
<div class="container">
    <header>
        <h1>Lineage Desk</h1>
        <span class="status" id="status">connecting…</span>
    </header>

    <div class="tabs">
        <button class="tab-btn active" data-tab="query">Query model</button>
        <button class="tab-btn" data-tab="add-model">Add model</button>
        <button class="tab-btn" data-tab="delete-model">Delete model</button>
        <button class="tab-btn" data-tab="add-lineage">Add lineage</button>
        <button class="tab-btn" data-tab="delete-lineage">Delete lineage</button>
    </div>

    <div class="tab-content active" id="query-tab">
        <form id="queryForm">
            <div class="row">
                <div><label>Layer</label><select id="queryLayer" data-options="layers" required></select></div>
                <div><label>Model name</label><input id="queryModelName" required></div>
            </div>
            <button class="submit-btn" type="submit">Search</button>
        </form>
        <div id="queryResults"></div>
    </div>

    <div class="tab-content" id="add-model-tab">
        <form id="addModelForm">
            <div class="row">
                <div><label>Layer</label><select id="addModelLayer" data-options="layers" required></select></div>
                <div><label>Model name</label><input id="addModelName" required></div>
            </div>
            <div class="row">
                <div><label>Comment</label><input id="addModelComment" required></div>
                <div><label>Subject domain</label><select id="addModelSubject" data-options="subjects" required></select></div>
            </div>
            <button class="submit-btn" type="submit">Add model</button>
        </form>
    </div>

    <div class="tab-content" id="delete-model-tab">
        <form id="deleteModelForm">
            <div class="row">
                <div><label>Layer</label><select id="deleteModelLayer" data-options="layers" required></select></div>
                <div class="field"><label>Model name</label><input id="deleteModelName" autocomplete="off" required>
                    <div class="autocomplete-suggestions" id="deleteModelSuggestions"></div></div>
            </div>
            <button class="submit-btn danger" type="submit">Delete model</button>
        </form>
    </div>

    <div class="tab-content" id="add-lineage-tab">
        <form id="addLineageForm">
            <div class="row">
                <div><label>Source layer</label><select id="sourceLayer" data-options="layers" required></select></div>
                <div class="field"><label>Source model</label><input id="sourceModel" autocomplete="off" required>
                    <div class="autocomplete-suggestions" id="sourceModelSuggestions"></div></div>
                <div><label>Source subject</label><input id="sourceSubject" readonly></div>
                <div><label>Source comment</label><input id="sourceComment" readonly></div>
            </div>
            <div class="row">
                <div><label>Target layer</label><select id="targetLayer" data-options="layers" required></select></div>
                <div class="field"><label>Target model</label><input id="targetModel" autocomplete="off" required>
                    <div class="autocomplete-suggestions" id="targetModelSuggestions"></div></div>
                <div><label>Target subject</label><input id="targetSubject" readonly></div>
                <div><label>Target comment</label><input id="targetComment" readonly></div>
            </div>
            <div class="row">
                <div><label>Task name</label><input id="taskName" required></div>
                <div><label>Task location</label><input id="taskLocation" required></div>
                <div><label>Schedule name</label><input id="scheduleName" required></div>
                <div><label>Schedule file</label><input id="scheduleLocation" required></div>
            </div>
            <div class="row">
                <div><label>Remarks</label><input id="remarks"></div>
            </div>
            <button class="submit-btn" type="submit">Add lineage</button>
        </form>
    </div>

    <div class="tab-content" id="delete-lineage-tab">
        <form id="deleteLineageForm">
            <div class="row">
                <div><label>Source layer</label><select id="deleteSourceLayer" data-options="layers" required></select></div>
                <div class="field"><label>Source model</label><input id="deleteSourceModel" autocomplete="off" required>
                    <div class="autocomplete-suggestions" id="deleteSourceSuggestions"></div></div>
            </div>
            <div class="row">
                <div><label>Target layer</label><select id="deleteTargetLayer" data-options="layers" required></select></div>
                <div class="field"><label>Target model</label><input id="deleteTargetModel" autocomplete="off" required>
                    <div class="autocomplete-suggestions" id="deleteTargetSuggestions"></div></div>
            </div>
            <button class="submit-btn danger" type="submit">Delete lineage</button>
        </form>
    </div>
</div>

<div class="toast" id="toast"></div>
<div class="modal" id="modal">
    <div class="modal-body">
        <div id="modalContent"></div>
        <div class="modal-actions">
            <button class="submit-btn" id="modalCancel" type="button">Cancel</button>
            <button class="submit-btn danger" id="modalConfirm" type="button">Confirm</button>
        </div>
    </div>
</div>

<script>
const API_KEY = new URLSearchParams(window.location.search).get('key') || '';
const $ = id => document.getElementById(id);

class ApiError extends Error {
    constructor(status, message) { super(message); this.status = status; }
}

async function api(path, options = {}) {
    const headers = {'Content-Type': 'application/json'};
    if (API_KEY) headers['Authorization'] = `Bearer ${API_KEY}`;
    const resp = await fetch(`/api/v1${path}`, {...options, headers});
    const body = await resp.json().catch(() => ({}));
    if (!resp.ok) {
        const detail = typeof body.detail === 'string' ? body.detail : JSON.stringify(body.detail || resp.status);
        throw new ApiError(resp.status, detail);
    }
    return body;
}

const esc = s => String(s ?? '').replace(/[&<>"']/g, c => ({'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;',"'":'&#39;'}[c]));

function showToast(message, type = 'info') {
    const toast = $('toast');
    toast.textContent = message;
    toast.className = `toast toast-${type} show`;
    setTimeout(() => toast.classList.remove('show'), 3000);
}

function showModal(title, html, onConfirm = null) {
    $('modalContent').innerHTML = `<h3>${esc(title)}</h3><p>${html}</p>`;
    $('modalConfirm').style.display = onConfirm ? '' : 'none';
    $('modal').style.display = 'block';
    const close = () => { $('modal').style.display = 'none'; };
    $('modalCancel').onclick = close;
    $('modal').onclick = e => { if (e.target === $('modal')) close(); };
    $('modalConfirm').onclick = () => { close(); if (onConfirm) onConfirm(); };
}

// 404/409 are the catalog's own "does not exist" / "already exists" answers
function reportFailure(prefix, e) {
    if (e instanceof ApiError && (e.status === 404 || e.status === 409)) {
        showModal(prefix, esc(e.message));
    } else {
        showToast(`${prefix}: ${e.message}`, 'error');
    }
}

function debounce(fn, wait) {
    let timer;
    return (...args) => { clearTimeout(timer); timer = setTimeout(() => fn(...args), wait); };
}

function clearForms() {
    document.querySelectorAll('form').forEach(f => f.reset());
    $('queryResults').innerHTML = '';
    document.querySelectorAll('.autocomplete-suggestions').forEach(s => s.classList.remove('show'));
}

function initTabs() {
    document.querySelectorAll('.tab-btn').forEach(btn => btn.addEventListener('click', () => {
        document.querySelectorAll('.tab-btn').forEach(b => b.classList.remove('active'));
        document.querySelectorAll('.tab-content').forEach(c => c.classList.remove('active'));
        btn.classList.add('active');
        $(`${btn.dataset.tab}-tab`).classList.add('active');
        clearForms();
    }));
}

async function loadOptions() {
    const options = await api('/options');
    document.querySelectorAll('select[data-options]').forEach(select => {
        const values = options[select.dataset.options] || [];
        select.innerHTML = '<option value="">— select —</option>' +
            values.map(v => `<option value="${esc(v)}">${esc(v)}</option>`).join('');
    });
}

function setupAutocomplete(inputId, suggestionsId, layerId, onSelect = null) {
    const input = $(inputId);
    const box = $(suggestionsId);
    const search = debounce(async () => {
        const q = input.value.trim();
        const layer = $(layerId).value;
        if (!q || !layer) { box.classList.remove('show'); return; }
        try {
            const params = new URLSearchParams({layer, q});
            const {suggestions} = await api(`/models/suggest?${params}`);
            if (!suggestions.length) { box.classList.remove('show'); return; }
            box.innerHTML = '';
            suggestions.forEach(s => {
                const item = document.createElement('div');
                item.className = 'autocomplete-item';
                item.textContent = onSelect ? s.label : s.model_name;
                item.onmousedown = () => {
                    input.value = s.model_name;
                    box.classList.remove('show');
                    if (onSelect) onSelect(s);
                };
                box.appendChild(item);
            });
            box.classList.add('show');
        } catch (e) {
            box.classList.remove('show');
        }
    }, 300);
    input.addEventListener('input', search);
    input.addEventListener('focus', () => { if (input.value.trim()) search(); });
    input.addEventListener('blur', () => setTimeout(() => box.classList.remove('show'), 200));
}

function renderModels(models) {
    if (!models.length) return '<div class="empty">No matching models</div>';
    return `<table>
        <tr><th>Model ID</th><th>Name</th><th>Comment</th><th>Layer</th><th>Subject</th><th>Created</th><th>Creator</th><th>Status</th></tr>
        ${models.map(m => `<tr>
            <td>${esc(m.model_id)}</td><td>${esc(m.model_name)}</td><td>${esc(m.comment)}</td>
            <td>${esc(m.layer)}</td><td>${esc(m.subject)}</td><td>${esc(m.created_at)}</td>
            <td>${esc(m.creator)}</td><td>${esc(m.status)}</td>
        </tr>`).join('')}
    </table>`;
}

async function handleQuery(e) {
    e.preventDefault();
    const params = new URLSearchParams({layer: $('queryLayer').value, name: $('queryModelName').value.trim()});
    try {
        const {models} = await api(`/models?${params}`);
        $('queryResults').innerHTML = renderModels(models);
    } catch (err) {
        showToast(`Query failed: ${err.message}`, 'error');
    }
}

async function handleAddModel(e) {
    e.preventDefault();
    const body = {
        layer: $('addModelLayer').value,
        model_name: $('addModelName').value.trim(),
        comment: $('addModelComment').value.trim(),
        subject: $('addModelSubject').value,
    };
    try {
        await api('/models', {method: 'POST', body: JSON.stringify(body)});
        showToast(`Model ${body.layer}-${body.model_name} added`, 'success');
        $('addModelForm').reset();
    } catch (err) {
        reportFailure('Add failed', err);
    }
}

async function handleDeleteModel(e) {
    e.preventDefault();
    const layer = $('deleteModelLayer').value;
    const name = $('deleteModelName').value.trim();
    try {
        const {models} = await api(`/models?${new URLSearchParams({layer, name})}`);
        const match = models.find(m => m.layer === layer && m.model_name === name);
        if (!match) { showModal('Delete failed', 'This layer has no such model'); return; }
        const html = `Delete this model and all of its lineage?<br><br>` +
            `Layer: ${esc(match.layer)}<br>Name: ${esc(match.model_name)}<br>` +
            `Comment: ${esc(match.comment)}<br>Subject: ${esc(match.subject)}`;
        showModal('Confirm delete', html, async () => {
            try {
                const res = await api(`/models/${encodeURIComponent(layer)}/${encodeURIComponent(name)}`, {method: 'DELETE'});
                showToast(`Model ${layer}-${name} deleted (${res.deleted_lineages} lineage rows)`, 'success');
                $('deleteModelForm').reset();
            } catch (err) {
                showToast(`Delete failed: ${err.message}`, 'error');
            }
        });
    } catch (err) {
        showToast(`Delete failed: ${err.message}`, 'error');
    }
}

function lineageEndpoints(srcLayer, srcModel, tgtLayer, tgtModel) {
    return {
        source_layer: $(srcLayer).value, source_model: $(srcModel).value.trim(),
        target_layer: $(tgtLayer).value, target_model: $(tgtModel).value.trim(),
    };
}

async function handleAddLineage(e) {
    e.preventDefault();
    const body = {
        ...lineageEndpoints('sourceLayer', 'sourceModel', 'targetLayer', 'targetModel'),
        task_name: $('taskName').value.trim(),
        task_location: $('taskLocation').value.trim(),
        schedule_name: $('scheduleName').value.trim(),
        schedule_location: $('scheduleLocation').value.trim(),
        remarks: $('remarks').value.trim(),
    };
    try {
        const res = await api('/lineage', {method: 'POST', body: JSON.stringify(body)});
        showToast(`${res.source} -> ${res.target} lineage added`, 'success');
        $('addLineageForm').reset();
    } catch (err) {
        reportFailure('Add failed', err);
    }
}

async function handleDeleteLineage(e) {
    e.preventDefault();
    const body = lineageEndpoints('deleteSourceLayer', 'deleteSourceModel', 'deleteTargetLayer', 'deleteTargetModel');
    const source = `${body.source_layer}-${body.source_model}`;
    const target = `${body.target_layer}-${body.target_model}`;
    try {
        await api('/lineage/check', {method: 'POST', body: JSON.stringify(body)});
    } catch (err) {
        reportFailure('Delete failed', err);
        return;
    }
    showModal('Confirm delete', `Delete this lineage?<br><br>Source: ${esc(source)}<br>Target: ${esc(target)}`, async () => {
        try {
            await api('/lineage', {method: 'DELETE', body: JSON.stringify(body)});
            showToast(`Lineage ${source} -> ${target} deleted`, 'success');
            $('deleteLineageForm').reset();
        } catch (err) {
            showToast(`Delete failed: ${err.message}`, 'error');
        }
    });
}

function fillEndpoint(prefix) {
    return s => {
        $(`${prefix}Subject`).value = s.subject || '';
        $(`${prefix}Comment`).value = s.comment || '';
    };
}

document.addEventListener('DOMContentLoaded', async () => {
    initTabs();
    $('queryForm').addEventListener('submit', handleQuery);
    $('addModelForm').addEventListener('submit', handleAddModel);
    $('deleteModelForm').addEventListener('submit', handleDeleteModel);
    $('addLineageForm').addEventListener('submit', handleAddLineage);
    $('deleteLineageForm').addEventListener('submit', handleDeleteLineage);

    setupAutocomplete('deleteModelName', 'deleteModelSuggestions', 'deleteModelLayer');
    setupAutocomplete('sourceModel', 'sourceModelSuggestions', 'sourceLayer', fillEndpoint('source'));
    setupAutocomplete('targetModel', 'targetModelSuggestions', 'targetLayer', fillEndpoint('target'));
    setupAutocomplete('deleteSourceModel', 'deleteSourceSuggestions', 'deleteSourceLayer');
    setupAutocomplete('deleteTargetModel', 'deleteTargetSuggestions', 'deleteTargetLayer');

    try {
        await loadOptions();
        $('status').textContent = 'connected';
    } catch (err) {
        $('status').textContent = 'not connected';
        showToast(`Loading options failed: ${err.message}`, 'error');
    }
});
</script>
</body>
</html>"""


@router.get("/", response_class=HTMLResponse)
async def dashboard():
    """Serve the catalog UI."""
    return DASHBOARD_HTML


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_alt():
    """Alternate dashboard path."""
    return DASHBOARD_HTML
