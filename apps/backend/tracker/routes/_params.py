from typing import Optional


def parse_int(v: Optional[str]) -> Optional[int]:
  # mirrors parseInt: "25abc" -> 25, junk -> None
  if v is None:
    return None
  s = v.strip()
  digits = ""
  for i, ch in enumerate(s):
    if ch.isdigit() or (i == 0 and ch in "+-"):
      digits += ch
    else:
      break
  try:
    return int(digits)
  except ValueError:
    return None
