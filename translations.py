"""
Group Image Cropper v1.0 - Translations Module
===============================================
UI text strings in multiple languages
"""

TRANSLATIONS = {
    "en": {
        "title": "✂️ Group Image Cropper",
        "subtitle": "Load up to 10 images, crop each one and download the result",

        # Sidebar
        "sb_config": "🛠 Settings",
        "lbl_language": "Language",
        "lbl_crop_memory": "Remember Crop Rectangle:",
        "opt_per_image": "Per Image",
        "opt_global": "Global",
        "lbl_save_dir": "Save folder (optional)",
        "help_save_dir": "Crops are written here. Leave empty to download them instead.",

        # Upload
        "uploader_label": "Click here to upload or drop images (max 10)",
        "msg_processing": "Processing images...",
        "msg_refresh": "If images fail to load, please refresh the page.",
        "btn_clear_workspace": "🗑 Clear workspace",

        # Gallery
        "files_header": "🖼 Images",
        "btn_crop": "✂️ Crop",
        "btn_delete": "🗑",
        "lbl_cropped": "✅ Cropped",
        "gallery_empty": "No images yet",

        # Crop history
        "history_title": "Crop History",
        "history_units": "(in pixels)",
        "history_empty": "No crops yet",
        "col_x": "X",
        "col_y": "Y",
        "col_width": "Width",
        "col_height": "Height",

        # Editor
        "lbl_original": "Original:",
        "lbl_aspect": "Aspect Ratio:",
        "aspect_free": "Free-form",
        "aspect_original": "Original",
        "aspect_square": "1:1",
        "lbl_save_on_cancel": "Save on Cancel",
        "btn_cancel": "Cancel",
        "btn_crop_download": "Crop & Download",
        "btn_download": "⬇️ Download {}",

        # Notices
        "notice_limit_title": "Images ignored",
        "notice_limit_at_limit": "{count} {images} ignored because of limit",
        "notice_limit_partial": "{first} added, {ignored} {were} ignored due to limit.",
        "notice_duplicates_title": "Duplicates detected",
        "notice_duplicates_desc": "{count} duplicate {files} ignored",
        "notice_invalid_type_title": "Invalid files",
        "notice_invalid_type_desc": "{count} {files} ignored (only {accepted} files are accepted)",
        "notice_file_size_title": "File too large",
        "notice_file_size_desc": "{filename} exceeds maximum size of {max_mb}MB",
        "notice_mime_mismatch_title": "Mismatched file type",
        "notice_mime_mismatch_desc": "{filename}: File extension doesn't match its content type ({mime_type})",
        "notice_dimensions_title": "Invalid image dimensions",
        "notice_dimensions_desc": "{count} {images_are} not between\n{min}px and {max}px in either direction",
        "notice_invalid_images_title": "Invalid images",
        "notice_invalid_images_desc": "{count} {were} invalid or corrupted",
        "notice_load_error_title": "Error",
        "notice_load_error_desc": "Failed to load image",
        "notice_save_error_title": "Save failed",
        "notice_save_error_desc": "{filename} could not be saved, crop settings were kept",

        # Plural forms: (singular, plural)
        "pl_image": ("image", "images"),
        "pl_file": ("file", "files"),
        "pl_first_image": ("First image", "First {count} images"),
        "pl_image_was": ("image was", "images were"),
        "pl_image_is": ("image is", "images are"),
    },
    "ua": {
        "title": "✂️ Групове кадрування зображень",
        "subtitle": "Завантажте до 10 зображень, обріжте кожне та збережіть результат",

        # Sidebar
        "sb_config": "🛠 Налаштування",
        "lbl_language": "Мова",
        "lbl_crop_memory": "Запам'ятовувати рамку:",
        "opt_per_image": "Для кожного зображення",
        "opt_global": "Спільну",
        "lbl_save_dir": "Папка збереження (необов'язково)",
        "help_save_dir": "Результати записуються сюди. Залиште порожнім, щоб завантажити їх.",

        # Upload
        "uploader_label": "Натисніть або перетягніть зображення (макс. 10)",
        "msg_processing": "Обробка зображень...",
        "msg_refresh": "Якщо зображення не завантажуються, оновіть сторінку.",
        "btn_clear_workspace": "🗑 Очистити робочу область",

        # Gallery
        "files_header": "🖼 Зображення",
        "btn_crop": "✂️ Обрізати",
        "btn_delete": "🗑",
        "lbl_cropped": "✅ Обрізано",
        "gallery_empty": "Зображень ще немає",

        # Crop history
        "history_title": "Історія кадрування",
        "history_units": "(у пікселях)",
        "history_empty": "Ще немає кадрувань",
        "col_x": "X",
        "col_y": "Y",
        "col_width": "Ширина",
        "col_height": "Висота",

        # Editor
        "lbl_original": "Оригінал:",
        "lbl_aspect": "Пропорції:",
        "aspect_free": "Вільні",
        "aspect_original": "Оригінальні",
        "aspect_square": "1:1",
        "lbl_save_on_cancel": "Зберігати при скасуванні",
        "btn_cancel": "Скасувати",
        "btn_crop_download": "Обрізати та зберегти",
        "btn_download": "⬇️ Завантажити {}",

        # Notices
        "notice_limit_title": "Зображення пропущено",
        "notice_limit_at_limit": "{count} {images} пропущено через ліміт",
        "notice_limit_partial": "{first} додано, {ignored} {were} пропущено через ліміт.",
        "notice_duplicates_title": "Знайдено дублікати",
        "notice_duplicates_desc": "{count} {files}-дублікатів пропущено",
        "notice_invalid_type_title": "Недійсні файли",
        "notice_invalid_type_desc": "{count} {files} пропущено (приймаються лише {accepted})",
        "notice_file_size_title": "Файл завеликий",
        "notice_file_size_desc": "{filename} перевищує максимальний розмір {max_mb}MB",
        "notice_mime_mismatch_title": "Невідповідний тип файлу",
        "notice_mime_mismatch_desc": "{filename}: розширення не відповідає типу вмісту ({mime_type})",
        "notice_dimensions_title": "Недійсні розміри зображення",
        "notice_dimensions_desc": "{count} {images_are} не в межах\n{min}px - {max}px за будь-яким виміром",
        "notice_invalid_images_title": "Недійсні зображення",
        "notice_invalid_images_desc": "{count} {were} пошкоджено або недійсне",
        "notice_load_error_title": "Помилка",
        "notice_load_error_desc": "Не вдалося завантажити зображення",
        "notice_save_error_title": "Помилка збереження",
        "notice_save_error_desc": "{filename} не вдалося зберегти, налаштування рамки збережено",

        # Plural forms: (singular, plural)
        "pl_image": ("зображення", "зображень"),
        "pl_file": ("файл", "файлів"),
        "pl_first_image": ("Перше зображення", "Перші {count} зображень"),
        "pl_image_was": ("зображення було", "зображень було"),
        "pl_image_is": ("зображення", "зображень"),
    }
}

def get_texts(lang_code: str) -> dict:
    """Return the text table for a language, falling back to English"""
    return TRANSLATIONS.get(lang_code, TRANSLATIONS["en"])
