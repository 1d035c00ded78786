# Константы для обхода дерева и поиска

# Имя игнор-файла в корне рабочей директории
GITIGNORE_FILENAME = ".gitignore"
GITIGNORE_CACHE_TTL_MS = 5000

# Всегда пропускаются, даже если показываются игнорируемые файлы
ALWAYS_EXCLUDED_NAMES = frozenset({".git", "node_modules"})

# Лимиты для дерева
DEFAULT_TREE_DEPTH = 5

# Лимиты для поиска по содержимому
DEFAULT_MAX_RESULTS = 1000
MAX_MATCHES_PER_FILE = 10
MAX_PREVIEW_LENGTH = 200
MAX_SEARCH_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB

IMAGE_EXTENSIONS = frozenset({
    "png", "jpg", "jpeg", "gif", "svg", "webp", "bmp", "tiff", "ico",
})

BINARY_EXTENSIONS = frozenset({
    # Archives
    "zip", "tar", "gz", "rar", "7z",
    # Executables
    "exe", "bin", "app", "deb", "rpm",
    # Documents
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
    # Media
    "mp4", "mov", "avi", "mkv", "mp3", "wav", "flac",
    # Compiled
    "class", "so", "dll", "dylib",
}) | IMAGE_EXTENSIONS
