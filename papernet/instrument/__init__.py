"""papernet.instrument — commercial paper model, codec and wire contract."""

from papernet.instrument.codec import decode_paper as decode_paper
from papernet.instrument.codec import encode_paper as encode_paper
from papernet.instrument.codec import paper_to_record as paper_to_record
from papernet.instrument.paper import PAPER_TRANSITIONS as PAPER_TRANSITIONS
from papernet.instrument.paper import CommercialPaper as CommercialPaper
from papernet.instrument.paper import PaperState as PaperState
from papernet.instrument.paper import check_transition as check_transition
from papernet.instrument.paper import confirm_state as confirm_state
from papernet.instrument.paper import make_key as make_key
from papernet.instrument.requests import CONTRACT_NAME as CONTRACT_NAME
from papernet.instrument.requests import CONTRACT_NAMESPACE as CONTRACT_NAMESPACE
from papernet.instrument.requests import TransactionRequest as TransactionRequest
from papernet.instrument.requests import buy_request as buy_request
from papernet.instrument.requests import get_paper_request as get_paper_request
from papernet.instrument.requests import issue_request as issue_request
from papernet.instrument.requests import redeem_request as redeem_request
