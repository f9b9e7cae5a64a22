from .consensus_node import ConsensusNode as ConsensusNode
