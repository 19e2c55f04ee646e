"""
Group Image Cropper v1.0 - Utils Module
========================================
Streamlit session wiring and small display helpers
"""

import os
import streamlit as st
import config
from crop_state import CropStateManager
from export import DirectorySave, DownloadSave
from ingestion import IngestionPipeline
from logger import get_logger
from session import Session
from translations import get_texts

logger = get_logger(__name__)

def inject_css():
    st.markdown("""
    <style>
        div[data-testid="column"] { background-color: #f8f9fa; border-radius: 8px; padding: 10px; border: 1px solid #eee; }
        .preview-placeholder { border: 2px dashed #e0e0e0; border-radius: 10px; padding: 40px; text-align: center; color: #888; }
        .file-caption { color: #888; text-align: center; white-space: nowrap; overflow: hidden; }
    </style>
    """, unsafe_allow_html=True)

def init_session_state():
    """Initializes all state variables"""
    if 'lang_code' not in st.session_state: st.session_state['lang_code'] = config.DEFAULT_LANGUAGE
    if 'notice_queue' not in st.session_state: st.session_state['notice_queue'] = []
    if 'uploader_key' not in st.session_state: st.session_state['uploader_key'] = 0
    if 'save_dir' not in st.session_state: st.session_state['save_dir'] = ''
    if 'reset_counter' not in st.session_state: st.session_state['reset_counter'] = 0

    T = get_texts(st.session_state['lang_code'])
    # Plain list: admission notices arrive from a timer thread
    queue = st.session_state['notice_queue']

    if 'session' not in st.session_state:
        st.session_state['session'] = Session()

    if 'pipeline' not in st.session_state:
        st.session_state['pipeline'] = IngestionPipeline(
            st.session_state['session'], notify=queue.extend, T=T
        )

    if 'downloads' not in st.session_state:
        st.session_state['downloads'] = DownloadSave()

    if 'crop_manager' not in st.session_state:
        st.session_state['crop_manager'] = CropStateManager(
            st.session_state['session'],
            downloads=st.session_state['downloads'],
            notify=queue.extend,
            T=T
        )

    # Language and save folder can change between reruns
    st.session_state['pipeline'].T = T
    manager = st.session_state['crop_manager']
    manager.T = T
    manager.saver = DirectorySave(st.session_state['save_dir'])

def show_pending_notices():
    """Flush queued notices as toasts"""
    queue = st.session_state['notice_queue']
    icons = {'warning': '⚠️', 'error': '❌', 'success': '✅', 'info': 'ℹ️'}
    while queue:
        n = queue.pop(0)
        st.toast(f"**{n.title}**\n\n{n.description}", icon=icons.get(n.severity.value))

def clear_workspace():
    """Drop every image and release their resources"""
    st.session_state['crop_manager'].abort()
    st.session_state['session'].clear()
    st.session_state['uploader_key'] += 1
    logger.info("Workspace cleared")

def truncate_filename(filename: str, max_chars: int = None) -> str:
    """
    Shorten a filename from the middle, keeping the extension

    Characters are removed alternately from the right and left halves
    of the name until it fits; '...ext' is the shortest form.
    """
    max_chars = max_chars or config.CAPTION_MAX_CHARS
    if len(filename) <= max_chars:
        return filename

    name, ext = os.path.splitext(filename)
    left = name[:len(name) // 2]
    right = name[(len(name) + 1) // 2:]
    remove_from_right = True

    while len(f"{left}...{right}{ext}") > max_chars:
        if remove_from_right and right:
            right = right[1:]
        elif not remove_from_right and left:
            left = left[:-1]
        elif right:
            right = right[1:]
        elif left:
            left = left[:-1]
        else:
            return f"...{ext}"
        remove_from_right = not remove_from_right

    if left or right:
        return f"{left}...{right}{ext}"
    return f"...{ext}"

def format_number(num: float) -> str:
    """Rounded integer text; never '-0'"""
    rounded = round(num)
    return '0' if rounded == 0 else str(rounded)

def format_size(size_bytes: int) -> str:
    size_mb = size_bytes / (1024 * 1024)
    if size_mb >= 1:
        return f"{size_mb:.2f} MB"
    return f"{size_bytes/1024:.1f} KB"
