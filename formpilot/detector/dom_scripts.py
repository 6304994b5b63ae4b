"""JavaScript evaluated inside the page by the detector, navigator and recorder."""

# Shared helpers: visibility, label lookup, nearby text and same-tag ordinal.
# Installed as plain function declarations so both the field scan and the
# recorder listener can reuse them.
ELEMENT_HELPERS_JS = """
// Same rule as Playwright's :visible: a non-empty box and visibility:visible.
// Opacity is ignored, so opacity-styled checkboxes still count.
const __fpIsVisible = (el) => {
    const rect = el.getBoundingClientRect();
    if (rect.width === 0 || rect.height === 0) return false;
    return window.getComputedStyle(el).visibility === 'visible';
};

const __fpFindLabel = (el) => {
    if (el.id) {
        const forLabel = document.querySelector(`label[for="${CSS.escape(el.id)}"]`);
        if (forLabel) return forLabel.textContent.trim();
    }
    const parentLabel = el.closest('label');
    if (parentLabel) {
        return parentLabel.textContent.replace(el.value || '', '').trim();
    }
    const labelledBy = el.getAttribute('aria-labelledby');
    if (labelledBy) {
        const text = labelledBy.split(/\\s+/)
            .map(id => document.getElementById(id))
            .filter(Boolean)
            .map(node => node.textContent.trim())
            .join(' ');
        if (text) return text;
    }
    let sibling = el.previousElementSibling;
    while (sibling) {
        if (sibling.tagName === 'LABEL') return sibling.textContent.trim();
        if (sibling.tagName === 'SPAN' || sibling.tagName === 'DIV') {
            const text = sibling.textContent.trim();
            if (text.length < 100) return text;
        }
        sibling = sibling.previousElementSibling;
    }
    return '';
};

const __fpNearbyText = (el) => {
    const parent = el.parentElement;
    if (!parent) return '';
    return (parent.textContent || '').replace(/\\s+/g, ' ').trim().substring(0, 200);
};

const __fpTagOrdinal = (el) => {
    const tag = el.tagName.toLowerCase();
    const peers = Array.from(document.getElementsByTagName(tag)).filter(__fpIsVisible);
    const pos = peers.indexOf(el);
    return pos === -1 ? 0 : pos + 1;
};
"""

FIELD_CANDIDATE_SELECTORS = [
    'input:not([type="hidden"]):not([type="submit"]):not([type="button"])'
    ':not([type="reset"]):not([type="image"])',
    "textarea",
    "select",
    '[contenteditable="true"]',
    '[role="textbox"]',
    '[role="combobox"]',
]

FIELD_SCAN_JS = """(candidateSelector) => {
""" + ELEMENT_HELPERS_JS + """
    const kindOf = (el) => {
        const tag = el.tagName.toLowerCase();
        if (tag === 'input' || tag === 'textarea' || tag === 'select') return tag;
        if (el.isContentEditable) return 'contenteditable';
        return 'aria-role';
    };

    const results = [];
    const elements = document.querySelectorAll(candidateSelector);
    let index = 0;
    for (const el of elements) {
        if (!__fpIsVisible(el)) continue;
        const rect = el.getBoundingClientRect();
        const tag = el.tagName.toLowerCase();
        const maxLength = typeof el.maxLength === 'number' && el.maxLength >= 0 ? el.maxLength : null;
        results.push({
            index: index++,
            kind: kindOf(el),
            tag: tag,
            input_type: tag === 'input' ? (el.type || 'text') : (tag === 'select' ? 'select' : tag),
            id: el.id || '',
            name: el.getAttribute('name') || '',
            placeholder: el.getAttribute('placeholder') || '',
            aria_label: el.getAttribute('aria-label') || '',
            autocomplete: el.getAttribute('autocomplete') || '',
            class_name: typeof el.className === 'string' ? el.className : '',
            role: el.getAttribute('role') || '',
            text: tag === 'input' ? '' : (el.textContent || '').trim().substring(0, 100),
            label: __fpFindLabel(el),
            context: __fpNearbyText(el),
            value: typeof el.value === 'string' ? el.value : '',
            required: !!el.required || el.getAttribute('aria-required') === 'true',
            disabled: !!el.disabled || el.getAttribute('aria-disabled') === 'true',
            readonly: !!el.readOnly,
            max_length: maxLength,
            pattern: el.getAttribute('pattern') || '',
            min_value: el.getAttribute('min') || '',
            max_value: el.getAttribute('max') || '',
            options: tag === 'select' ? Array.from(el.options).map(o => o.text.trim()) : [],
            bounding_box: {x: rect.x, y: rect.y, width: rect.width, height: rect.height},
            tag_ordinal: __fpTagOrdinal(el),
        });
    }
    return results;
}"""

PAGE_TEXT_JS = "() => (document.body ? document.body.innerText : '')"

# Scripted click used as the last navigation strategy. Runs per frame; inside
# a frame it also reaches same-origin child iframes through contentDocument.
FRAME_BUTTON_CLICK_JS = """(label) => {
    const wanted = label.toLowerCase();
    const buttonSelector = 'button, input[type="submit"], input[type="button"], a[role="button"], [role="button"]';
    const buttons = Array.from(document.querySelectorAll(buttonSelector));
    for (const iframe of document.querySelectorAll('iframe')) {
        try {
            const doc = iframe.contentDocument;
            if (doc) buttons.push(...doc.querySelectorAll(buttonSelector));
        } catch (e) {
            // cross-origin frame; reached through the driver's frame list instead
        }
    }
    const target = buttons.find(btn => {
        const text = (btn.innerText || btn.textContent || btn.value || '').toLowerCase();
        return text.includes(wanted);
    });
    if (!target) return false;
    target.click();
    return true;
}"""

RECORDER_BINDING = "__formpilotRecord"

# Listener installed once per document; the window marker keeps re-injection
# after a load event idempotent.
RECORDER_JS = """() => {
    if (window.__formpilotRecorderAttached) return false;
    window.__formpilotRecorderAttached = true;
""" + ELEMENT_HELPERS_JS + """
    const describe = (el) => ({
        tag: el.tagName.toLowerCase(),
        type: el.type || null,
        id: el.id || null,
        name: el.getAttribute('name') || null,
        class_name: typeof el.className === 'string' && el.className ? el.className : null,
        placeholder: el.getAttribute('placeholder') || null,
        aria_label: el.getAttribute('aria-label') || null,
        role: el.getAttribute('role') || null,
        label: ['INPUT', 'TEXTAREA', 'SELECT'].includes(el.tagName) ? (__fpFindLabel(el) || null) : null,
        text: (el.textContent || '').trim().substring(0, 100) || null,
        value: typeof el.value === 'string' ? el.value : null,
        tag_ordinal: __fpTagOrdinal(el),
    });

    const emit = (type, el, value) => {
        const payload = {type: type, timestamp: Date.now(), url: window.location.href, element: describe(el)};
        if (value !== undefined) payload.value = value;
        window.""" + RECORDER_BINDING + """(payload);
    };

    document.addEventListener('click', (e) => {
        if (e.target instanceof Element) emit('click', e.target);
    }, true);

    document.addEventListener('change', (e) => {
        const el = e.target;
        if (!['INPUT', 'TEXTAREA', 'SELECT'].includes(el.tagName)) return;
        const checkable = el.type === 'checkbox' || el.type === 'radio';
        emit('input', el, checkable ? String(el.checked) : el.value);
    }, true);

    document.addEventListener('submit', (e) => {
        if (e.target instanceof Element) emit('submit', e.target);
    }, true);
    return true;
}"""
