"""
Group Image Cropper v1.0 - Editor Module
=========================================
Crop dialog: interactive cropper, numeric fields, aspect ratio
"""

import streamlit as st
from typing import Dict, Optional, Tuple
from streamlit_cropper import st_cropper
import config
from crop_engine import to_actual, to_display
from crop_state import CropStateManager
from logger import get_logger
from models import CropRect, ImageRecord
from utils import format_number, format_size

logger = get_logger(__name__)

def get_file_info_str(record: ImageRecord, dimensions: Tuple[int, int]) -> str:
    """Generate file info string for display"""
    width, height = dimensions
    return (
        f"📄 **{record.filename}** &nbsp;•&nbsp; 📏 **{width}x{height}** "
        f"&nbsp;•&nbsp; 💾 **{format_size(record.file.size)}**"
    )

def _aspect_tuple(selector: str, dimensions: Tuple[int, int]) -> Optional[Tuple[int, int]]:
    """Aspect ratio in the form the cropper widget expects"""
    if selector == config.ASPECT_SQUARE:
        return (1, 1)
    if selector == config.ASPECT_ORIGINAL:
        return dimensions
    return None

def _default_coords(manager: CropStateManager) -> Tuple[int, int, int, int]:
    """Surface rectangle as (left, right, top, bottom) in proxy pixels"""
    surface = manager.surface
    rect = surface.get_data()
    container = surface.get_container_data()
    nat_w, nat_h = manager.dimensions
    left = to_display(rect.x, nat_w, container['width'])
    top = to_display(rect.y, nat_h, container['height'])
    right = left + to_display(rect.width, nat_w, container['width'])
    bottom = top + to_display(rect.height, nat_h, container['height'])
    return left, right, top, bottom

def _sync_drag(manager: CropStateManager, box: Optional[Dict[str, float]]):
    """Feed a box reported by the cropper widget into the crop surface"""
    if not box or not manager.is_editing:
        return

    surface = manager.surface
    container = surface.get_container_data()
    nat_w, nat_h = manager.dimensions
    dragged = CropRect(
        to_actual(box['left'], nat_w, container['width']),
        to_actual(box['top'], nat_h, container['height']),
        to_actual(box['width'], nat_w, container['width']),
        to_actual(box['height'], nat_h, container['height'])
    )

    current = surface.get_data()
    # One display pixel covers this many image pixels
    tolerance = max(1.0, nat_w / container['width'], nat_h / container['height'])
    if any(abs(a - b) > tolerance for a, b in zip(
        (dragged.x, dragged.y, dragged.width, dragged.height),
        (current.x, current.y, current.width, current.height)
    )):
        logger.debug(f"Drag: {current} → {dragged}")
        surface.drag_to(dragged)

def _bump_reset():
    st.session_state['reset_counter'] += 1

def _on_field_commit(manager: CropStateManager, key: str, widget_key: str):
    manager.commit_field(key, st.session_state[widget_key])
    _bump_reset()

def _on_aspect_change(manager: CropStateManager, widget_key: str):
    manager.change_aspect(st.session_state[widget_key])
    _bump_reset()

def _on_save_on_cancel(manager: CropStateManager, widget_key: str):
    manager.save_on_cancel = st.session_state[widget_key]

@st.dialog("🛠 Crop", width="large")
def open_editor_dialog(T: dict):
    """
    Crop dialog for the image the manager is editing

    Args:
        T: Translation dictionary
    """
    manager: CropStateManager = st.session_state['crop_manager']
    if not manager.is_editing:
        return

    record = manager.current_image
    surface = manager.surface
    surface.mark_ready()

    reset = st.session_state['reset_counter']
    st.caption(get_file_info_str(record, manager.dimensions))

    col_canvas, col_controls = st.columns([3, 1], gap="small")

    # === CONTROLS ===
    with col_controls:
        st.markdown(f"**{T['lbl_original']}** {manager.dimensions[0]} × {manager.dimensions[1]}")

        labels = {
            config.ASPECT_FREE: T['aspect_free'],
            config.ASPECT_ORIGINAL: T['aspect_original'],
            config.ASPECT_SQUARE: T['aspect_square'],
        }
        aspect_key = f"asp_{record.id}_{reset}"
        st.selectbox(
            T['lbl_aspect'],
            config.ASPECT_SELECTORS,
            index=config.ASPECT_SELECTORS.index(manager.selected_aspect),
            format_func=labels.get,
            key=aspect_key,
            on_change=_on_aspect_change,
            args=(manager, aspect_key)
        )

        st.divider()

        for key, label in (('x', T['col_x']), ('y', T['col_y']),
                           ('width', T['col_width']), ('height', T['col_height'])):
            widget_key = f"num_{key}_{record.id}_{reset}"
            st.number_input(
                label,
                min_value=0,
                max_value=config.CROP_MAX,
                value=int(format_number(manager.display[key])),
                step=1,
                key=widget_key,
                on_change=_on_field_commit,
                args=(manager, key, widget_key)
            )

        st.divider()

        soc_key = f"soc_{record.id}"
        st.checkbox(
            T['lbl_save_on_cancel'],
            value=manager.save_on_cancel,
            key=soc_key,
            on_change=_on_save_on_cancel,
            args=(manager, soc_key)
        )

    # === CANVAS ===
    with col_canvas:
        cropper_id = f"crp_{record.id}_{reset}"
        try:
            box = st_cropper(
                surface.get_proxy_image(),
                realtime_update=True,
                box_color='#FF0000',
                aspect_ratio=_aspect_tuple(manager.selected_aspect, manager.dimensions),
                return_type='box',
                default_coords=_default_coords(manager),
                should_resize_image=False,
                key=cropper_id
            )
            _sync_drag(manager, box)
        except Exception as e:
            st.error(f"Cropper error: {e}")
            logger.error(f"Cropper failed: {e}", exc_info=True)

    # === ACTIONS ===
    with col_controls:
        rect = manager.active_settings
        st.info(f"📏 **{format_number(rect.width)} × {format_number(rect.height)}** px")

        c_cancel, c_crop = st.columns(2)
        with c_cancel:
            if st.button(T['btn_cancel'], use_container_width=True, key=f"cancel_{record.id}"):
                manager.cancel()
                _bump_reset()
                st.rerun()

        with c_crop:
            if st.button(T['btn_crop_download'], type="primary", use_container_width=True,
                         key=f"crop_{record.id}"):
                outcome = manager.commit()
                logger.info(f"Commit {record.filename}: {outcome.value}")
                _bump_reset()
                st.rerun()
