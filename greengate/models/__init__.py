"""GreenGate models package.

Defines the shared data contracts between the Green client, the dispatcher and
the HTTP hook layer:

  - scan.py       — ScanResponse, TextTaskResult, Verdict (parsed Green envelope)
  - rejection.py  — Response builders for HTTP 400 illegal content and
                    HTTP 502 scan failure
"""
