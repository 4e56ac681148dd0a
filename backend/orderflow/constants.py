"""Reference data shared by schemas and seeders."""

from typing import Dict, List, Literal

JenisPembiayaan = Literal["Passenger", "Pick Up", "Pass Comm", "Truck", "EV (Listrik)"]
JenisAktivitas = Literal["Kunjungan Dealer", "Event Dealer", "Pameran"]

CHECKLIST_ITEMS = (
    "ktpPemohon",
    "ktpPasangan",
    "kartuKeluarga",
    "npwp",
    "bkr",
    "livin",
    "rekTabungan",
    "mufApp",
)

DEALER_BY_MERK: Dict[str, List[str]] = {
    "Honda": ["ISTANA MOBIL TRIO MOTOR", "ISTANA MOBIL TRIO BANJARMASIN", "ISTANA MOBIL TRIO RAYA"],
    "Daihatsu": [
        "ASTRA DAIHATSU-BANJARMASIN",
        "ASTRA DAIHATSU TBK – BANJARBARU",
        "TRI MANDIRI SELARAS-MRTPURA",
        "TRI MANDIRI SEJATI-KBN BNGA",
        "TRI MANDIRI SELARAS-KAYUTANGI",
    ],
    "Mitsubishi": ["BARITO BERLIAN MOTOR", "SUMBER BERLIAN MOTORS"],
    "Suzuki": ["MITRA MEGAH PROFITAMAS"],
    "Toyota": ["AUTO 2000 BANJARMASIN"],
    "Chery": ["AVANTE EKSA MOBILINDO - BANJARMASIN"],
    "Hyundai": ["ASIA MOBIL INTERNATIONAL"],
    "Wuling": ["ARISTA JAYA LESTARI-BNJRMSI", "ARISTA ELEKTRIKA PIK"],
    "BYD": ["ARISTA JAYA LESTARI-BNJRMSI", "ARISTA ELEKTRIKA PIK"],
    "Isuzu": ["ASTRA ISUZU-A YANI BANJARMASIN"],
    "Nissan": ["WAHANA DELTA PRIMA BNJRMSIN"],
    "Kia": ["WAHANA DELTA PRIMA BNJRMSIN"],
    "Citroen": ["WAHANA DELTA PRIMA BNJRMSIN"],
    "Mazda": ["PRIMA HARAPAN MOTOR"],
    "Hino": ["MITRA PROFITAMAS MOTOR"],
}
