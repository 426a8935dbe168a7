from sqlalchemy import Column, Integer, String, Text

from core.database import Base


class WeeklySlot(Base):
    __tablename__ = "weekly_slots"

    # Composite key so each week can carry its own copy of a template row
    id = Column(String, primary_key=True)
    week_key = Column(String, primary_key=True, default="")  # "" = standing template

    jam = Column(String, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)

    # Raw cells: "", "ISTIRAHAT" or a JSON booking, see core.slot_codec
    senin = Column(Text, nullable=False, default="")
    selasa = Column(Text, nullable=False, default="")
    rabu = Column(Text, nullable=False, default="")
    kamis = Column(Text, nullable=False, default="")
    jumat = Column(Text, nullable=False, default="")
    sabtu = Column(Text, nullable=False, default="")
    minggu = Column(Text, nullable=False, default="")

    def __repr__(self):
        return f"<WeeklySlot {self.id} {self.jam} week={self.week_key or '-'}>"
