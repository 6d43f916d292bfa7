"""Domain constants shared by services and routes."""

# Mean Earth radius used by the haversine distance
EARTH_RADIUS_KM = 6371.0

# Japanese prefectures, north to south (JIS X 0401 order)
PREFECTURE_ORDER = (
    "北海道", "青森県", "岩手県", "宮城県", "秋田県", "山形県", "福島県",
    "茨城県", "栃木県", "群馬県", "埼玉県", "千葉県", "東京都", "神奈川県",
    "新潟県", "富山県", "石川県", "福井県", "山梨県", "長野県", "岐阜県",
    "静岡県", "愛知県", "三重県", "滋賀県", "京都府", "大阪府", "兵庫県",
    "奈良県", "和歌山県", "鳥取県", "島根県", "岡山県", "広島県", "山口県",
    "徳島県", "香川県", "愛媛県", "高知県", "福岡県", "佐賀県", "長崎県",
    "熊本県", "大分県", "宮崎県", "鹿児島県", "沖縄県",
)

# Ordinal for prefectures missing from PREFECTURE_ORDER (sorts last)
UNKNOWN_PREFECTURE_ORDINAL = 999

# ── Listing sort keys ─────────────────────────────────────────────────────
SORT_RATING = "rating"
SORT_VISITS = "visits"
SORT_PREFECTURE = "prefecture"
SORT_DISTANCE = "distance"

# ── Ranking periods (most_visited) ────────────────────────────────────────
PERIOD_ALL = "all"
PERIOD_YEAR = "year"
PERIOD_MONTH = "month"
RANKING_PERIODS = (PERIOD_ALL, PERIOD_YEAR, PERIOD_MONTH)

# Number of leading ranks flagged with is_top5
TOP_RANK_CUTOFF = 5

# Hidden gems need at least this many visits to be considered
HIDDEN_GEM_MIN_VISITS = 2

# ── User-facing messages ──────────────────────────────────────────────────
MSG_LOCATION_REQUIRED = "位置情報が必要です"
MSG_PHOTOS_REQUIRED = "photos が必要です"
MSG_PHOTO_NOT_FOUND = "写真が見つかりません"
MSG_PHOTO_ID_REQUIRED = "photo_id が必要です"
MSG_HEADER_PHOTO_NOT_FOUND = "指定された写真が見つかりません"
MSG_AVATAR_REQUIRED = "アバター画像が選択されていません"
MSG_FORBIDDEN = "権限がありません"
MSG_ADMIN_REQUIRED = "管理者権限が必要です"
MSG_LOGIN_REQUIRED = "ログインが必要です"
MSG_INVALID_CREDENTIALS = "メールアドレスまたはパスワードが違います"
MSG_ALREADY_IN_WISHLIST = "Aquarium はすでにリストに追加されています"
