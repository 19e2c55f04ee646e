"""
Group Image Cropper v1.0 - Main Application
============================================
Batch-load up to ten images, crop each one and export the result
"""

import streamlit as st

import config
import editor_module as editor
import translations as T_DATA
import utils
from logger import get_logger
from models import FileBlob

logger = get_logger(__name__)

st.set_page_config(
    page_title=f"{config.APP_NAME} v{config.APP_VERSION}",
    page_icon="✂️",
    layout="wide",
    initial_sidebar_state="expanded"
)

utils.inject_css()
utils.init_session_state()

T = T_DATA.get_texts(st.session_state['lang_code'])
session = st.session_state['session']
pipeline = st.session_state['pipeline']
manager = st.session_state['crop_manager']

# === SIDEBAR ===
with st.sidebar:
    st.header(T['sb_config'])

    st.selectbox(
        T['lbl_language'], list(T_DATA.TRANSLATIONS.keys()),
        format_func=str.upper, key='lang_code'
    )

    mode_labels = {config.MODE_PER_IMAGE: T['opt_per_image'], config.MODE_GLOBAL: T['opt_global']}
    mode = st.radio(
        T['lbl_crop_memory'],
        list(mode_labels.keys()),
        index=0 if session.is_per_image else 1,
        format_func=mode_labels.get
    )
    session.set_mode(mode)

    st.text_input(T['lbl_save_dir'], key='save_dir', help=T['help_save_dir'])
    st.caption(T['msg_refresh'])

# === MAIN ===
st.title(T['title'])
st.caption(T['subtitle'])

if st.button(T['btn_clear_workspace'], type="secondary"):
    utils.clear_workspace()
    st.rerun()

uploaded = st.file_uploader(
    T['uploader_label'],
    type=[ext.lstrip('.') for exts in config.ACCEPTED_TYPES.values() for ext in exts],
    accept_multiple_files=True,
    key=f"up_{st.session_state['uploader_key']}"
)

if uploaded:
    blobs = [FileBlob.from_upload(f) for f in uploaded]
    if pipeline.admit(blobs):
        with st.spinner(T['msg_processing']):
            pipeline.wait()
    st.session_state['uploader_key'] += 1
    st.rerun()

# Crops staged for download
for item in st.session_state['downloads'].take():
    st.download_button(
        T['btn_download'].format(item.filename),
        item.data,
        file_name=item.filename,
        mime=item.mime_type,
        key=f"dl_{item.filename}_{st.session_state['reset_counter']}"
    )

# === GALLERY ===
st.subheader(f"{T['files_header']} ({len(session)}/{config.MAX_IMAGES})")
images = session.images
if not images:
    st.markdown(f'<div class="preview-placeholder">{T["gallery_empty"]}</div>', unsafe_allow_html=True)

cols = st.columns(config.GALLERY_COLUMNS)
for i, record in enumerate(images):
    with cols[i % config.GALLERY_COLUMNS]:
        st.image(record.display_path, use_container_width=True)
        st.markdown(
            f'<div class="file-caption" title="{record.filename}">'
            f'{utils.truncate_filename(record.filename)}</div>',
            unsafe_allow_html=True
        )
        if record.cropped:
            st.caption(T['lbl_cropped'])

        c_crop, c_del = st.columns([3, 1])
        with c_crop:
            if st.button(T['btn_crop'], key=f"crop_btn_{record.id}", use_container_width=True,
                         disabled=manager.is_editing):
                manager.open(record.id)
                st.rerun()
        with c_del:
            if st.button(T['btn_delete'], key=f"del_{record.id}", use_container_width=True):
                if manager.image_id == record.id:
                    manager.abort()
                session.delete(record.id)
                st.rerun()

        with st.expander(f"{T['history_title']} {T['history_units']}"):
            if not record.crop_history:
                st.caption(T['history_empty'])
            else:
                st.table([
                    {
                        T['col_x']: utils.format_number(c.x),
                        T['col_y']: utils.format_number(c.y),
                        T['col_width']: utils.format_number(c.width),
                        T['col_height']: utils.format_number(c.height),
                    }
                    for c in record.crop_history
                ])

if manager.is_editing:
    editor.open_editor_dialog(T)

utils.show_pending_notices()
